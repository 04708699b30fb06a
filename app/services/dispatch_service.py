"""Render a rule's response and deliver it through the provider.

Buttons and lists go through three tiers: native endpoint, interactive
endpoint, then a plain-text rendering of the options. Each tier's failure
is logged and moves on to the next one.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from app.logging_config import get_logger
from app.schemas.rule import ListSection, ResponseContent, ResponseType, RuleButton
from app.services.cooldown_service import ResponseDecision
from app.services.evolution_service import EvolutionService
from app.services.result import Result

logger = get_logger("dispatch_service")

MAX_BUTTONS = 3
BUTTON_TITLE_LIMIT = 20
MAX_LIST_ITEMS_PER_SECTION = 10
LIST_SECTION_TITLE_LIMIT = 24
LIST_ITEM_TITLE_LIMIT = 24
LIST_ITEM_DESCRIPTION_LIMIT = 72
LIST_BUTTON_LIMIT = 20
LIST_HEADER_TITLE = "Menu"
DEFAULT_LIST_BUTTON = "Ver opções"

BUTTONS_TEXT_FOOTER = "_Responda com o número da opção desejada._"
LIST_TEXT_HEADER = "📋 *Opções disponíveis:*"
LIST_TEXT_FOOTER = "_Responda com o nome ou número da opção desejada._"

TIER_NATIVE = "native"
TIER_INTERACTIVE = "interactive"
TIER_TEXT = "text"

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class DispatchResult:
    sent: bool
    delivered_type: str  # response type actually delivered
    tier: Optional[str] = None
    payload: Optional[dict] = None
    error: Optional[str] = None


def _button_id(button: RuleButton, index: int) -> str:
    return button.trigger or button.id or f"btn_{index}"


def build_reply_buttons(buttons: list[RuleButton]) -> list[dict]:
    return [
        {
            "type": "reply",
            "reply": {"id": _button_id(button, index), "title": button.text[:BUTTON_TITLE_LIMIT]},
        }
        for index, button in enumerate(buttons[:MAX_BUTTONS])
    ]


def build_list_sections(sections: list[ListSection]) -> list[dict]:
    built = []
    for section in sections:
        rows = []
        for index, item in enumerate(section.items[:MAX_LIST_ITEMS_PER_SECTION]):
            rows.append(
                {
                    "rowId": item.trigger or item.id or f"row_{index}",
                    "title": item.title[:LIST_ITEM_TITLE_LIMIT],
                    "description": (item.description or "")[:LIST_ITEM_DESCRIPTION_LIMIT],
                }
            )
        built.append({"title": section.title[:LIST_SECTION_TITLE_LIMIT], "rows": rows})
    return built


def render_buttons_as_text(text: str, buttons: list[RuleButton]) -> str:
    lines = [f"{index}️⃣ {button.text}" for index, button in enumerate(buttons, start=1)]
    return f"{text}\n\n" + "\n".join(lines) + f"\n\n{BUTTONS_TEXT_FOOTER}"


def render_list_as_text(text: str, sections: list[ListSection]) -> str:
    rendered = f"{text}\n\n{LIST_TEXT_HEADER}\n"
    counter = 1
    for section in sections:
        if section.title:
            rendered += f"\n*{section.title}*\n"
        for item in section.items:
            description = f" - {item.description}" if item.description else ""
            rendered += f"{counter}. {item.title}{description}\n"
            counter += 1
    return rendered + f"\n{LIST_TEXT_FOOTER}"


def sanitize_range(low: Optional[float], high: Optional[float], default_low: float, default_high: float):
    low = default_low if low is None else max(float(low), 0.0)
    high = default_high if high is None else max(float(high), 0.0)
    if low > high:
        low, high = high, low
    return low, high


def sample_delay_seconds(low: Optional[float], high: Optional[float], rng: Optional[random.Random] = None) -> float:
    """Uniform delay in [low, high] seconds; reversed or negative bounds are repaired."""
    low, high = sanitize_range(low, high, 2.0, 5.0)
    return (rng or random).uniform(low, high)


def _from_result(result: Result[dict], delivered_type: str, tier: str) -> DispatchResult:
    if result.ok:
        return DispatchResult(sent=True, delivered_type=delivered_type, tier=tier, payload=result.value)
    return DispatchResult(sent=False, delivered_type=delivered_type, tier=tier, error=result.error)


async def send_buttons_with_fallback(
    provider: EvolutionService, phone: str, content: ResponseContent
) -> DispatchResult:
    buttons = build_reply_buttons(content.buttons)

    native = await provider.send_buttons(phone, content.text, buttons)
    if native.ok:
        return _from_result(native, ResponseType.TEXT_BUTTONS.value, TIER_NATIVE)
    logger.warning(f"Native buttons failed, trying interactive: {native.error}")

    interactive = await provider.send_interactive_buttons(phone, content.text, buttons)
    if interactive.ok:
        return _from_result(interactive, ResponseType.TEXT_BUTTONS.value, TIER_INTERACTIVE)
    logger.warning(f"Interactive buttons failed, sending as text: {interactive.error}")

    fallback = await provider.send_text(phone, render_buttons_as_text(content.text, content.buttons))
    return _from_result(fallback, ResponseType.TEXT.value, TIER_TEXT)


async def send_list_with_fallback(
    provider: EvolutionService, phone: str, content: ResponseContent
) -> DispatchResult:
    sections = build_list_sections(content.sections)
    button_text = (content.list_button or DEFAULT_LIST_BUTTON)[:LIST_BUTTON_LIMIT]

    native = await provider.send_list(phone, content.text, button_text, sections, title=LIST_HEADER_TITLE)
    if native.ok:
        return _from_result(native, ResponseType.TEXT_LIST.value, TIER_NATIVE)
    logger.warning(f"Native list failed, trying interactive: {native.error}")

    interactive = await provider.send_interactive_list(
        phone, content.text, button_text, sections, title=LIST_HEADER_TITLE
    )
    if interactive.ok:
        return _from_result(interactive, ResponseType.TEXT_LIST.value, TIER_INTERACTIVE)
    logger.warning(f"Interactive list failed, sending as text: {interactive.error}")

    fallback = await provider.send_text(phone, render_list_as_text(content.text, content.sections))
    return _from_result(fallback, ResponseType.TEXT.value, TIER_TEXT)


async def dispatch_response(
    provider: EvolutionService,
    phone: str,
    decision: ResponseDecision,
    content: ResponseContent,
    *,
    delay_seconds: float = 0.0,
    presence_delay_ms: Optional[int] = None,
    sleep_func: SleepFunc = asyncio.sleep,
) -> DispatchResult:
    """Wait, optionally show "typing...", then send one response.

    Never raises for provider failures; the result says whether anything
    was delivered and in which format.
    """
    if delay_seconds > 0:
        await sleep_func(delay_seconds)

    if presence_delay_ms is not None:
        await provider.send_presence(phone, presence_delay_ms)

    response_type = decision.effective_type

    if response_type == ResponseType.TEXT_IMAGE.value and content.image_url:
        result = await provider.send_media(phone, content.image_url, caption=content.text)
        return _from_result(result, ResponseType.TEXT_IMAGE.value, TIER_NATIVE)

    if response_type == ResponseType.TEXT_BUTTONS.value and content.buttons:
        return await send_buttons_with_fallback(provider, phone, content)

    if response_type == ResponseType.TEXT_LIST.value and any(section.items for section in content.sections):
        return await send_list_with_fallback(provider, phone, content)

    result = await provider.send_text(phone, content.text)
    return _from_result(result, ResponseType.TEXT.value, TIER_NATIVE)
