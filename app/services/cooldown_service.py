"""Cooldown and interactive-content gates.

The cooldown gate runs first and may block a reply entirely. The
interactive-content gate runs second and may only downgrade buttons/lists
to plain text.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.models import ChatbotContact, ChatbotRule
from app.schemas.rule import INTERACTIVE_RESPONSE_TYPES, CooldownMode, ResponseType
from app.services.result import Result

POLITE_COOLDOWN_HOURS = 24
DEFAULT_MODERATE_COOLDOWN_HOURS = 24
INTERACTIVE_COOLDOWN_HOURS = 24

DOWNGRADE_FREE_MODE = "free mode sends text only"
DOWNGRADE_INTERACTIVE_LIMIT = "interactive content already sent in the last 24h"
DOWNGRADE_UNSUPPORTED = "unsupported response type"

SUPPORTED_RESPONSE_TYPES = {item.value for item in ResponseType}


@dataclass(frozen=True)
class CooldownCheck:
    can_send: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ResponseDecision:
    """Rule to answer with, and the format it will actually be sent in."""

    rule: ChatbotRule
    requested_type: str
    effective_type: str
    downgrade_reason: Optional[str] = None

    @property
    def downgraded(self) -> bool:
        return self.requested_type != self.effective_type


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_since(value: Optional[datetime], now: datetime) -> Optional[float]:
    if value is None:
        return None
    return (_as_utc(now) - _as_utc(value)).total_seconds() / 3600


def can_respond(contact: Optional[ChatbotContact], rule: ChatbotRule, now: datetime) -> CooldownCheck:
    """Cooldown gate for one rule and one contact."""
    if rule.cooldown_mode == CooldownMode.FREE.value:
        return CooldownCheck(can_send=True)

    elapsed = hours_since(contact.last_response_at if contact else None, now)
    if elapsed is None:
        return CooldownCheck(can_send=True)

    if rule.cooldown_mode == CooldownMode.POLITE.value and elapsed < POLITE_COOLDOWN_HOURS:
        return CooldownCheck(can_send=False, reason=f"{POLITE_COOLDOWN_HOURS}h cooldown active")

    if rule.cooldown_mode == CooldownMode.MODERATE.value:
        cooldown_hours = rule.cooldown_hours if rule.cooldown_hours is not None else DEFAULT_MODERATE_COOLDOWN_HOURS
        if elapsed < cooldown_hours:
            return CooldownCheck(can_send=False, reason=f"{cooldown_hours}h cooldown active")

    return CooldownCheck(can_send=True)


def can_send_interactive_content(contact: Optional[ChatbotContact], response_type: str, now: datetime) -> bool:
    """Buttons and lists may each be sent to a contact at most once per 24h."""
    if contact is None:
        return True

    if response_type == ResponseType.TEXT_BUTTONS.value:
        last_sent = contact.last_buttons_sent_at
    elif response_type == ResponseType.TEXT_LIST.value:
        last_sent = contact.last_list_sent_at
    else:
        return True

    elapsed = hours_since(last_sent, now)
    return elapsed is None or elapsed >= INTERACTIVE_COOLDOWN_HOURS


def resolve_effective_type(
    contact: Optional[ChatbotContact], rule: ChatbotRule, now: datetime
) -> tuple[str, Optional[str]]:
    requested = rule.response_type or ResponseType.TEXT.value

    if requested not in SUPPORTED_RESPONSE_TYPES:
        return ResponseType.TEXT.value, DOWNGRADE_UNSUPPORTED

    if requested in INTERACTIVE_RESPONSE_TYPES and rule.cooldown_mode == CooldownMode.FREE.value:
        return ResponseType.TEXT.value, DOWNGRADE_FREE_MODE

    if not can_send_interactive_content(contact, requested, now):
        return ResponseType.TEXT.value, DOWNGRADE_INTERACTIVE_LIMIT

    return requested, None


def evaluate_rule(contact: Optional[ChatbotContact], rule: ChatbotRule, now: datetime) -> Result[ResponseDecision]:
    """Run both gates. Failure means the reply is blocked by cooldown."""
    check = can_respond(contact, rule, now)
    if not check.can_send:
        return Result.failure(check.reason or "cooldown active", "cooldown_active")

    effective_type, downgrade_reason = resolve_effective_type(contact, rule, now)
    return Result.success(
        ResponseDecision(
            rule=rule,
            requested_type=rule.response_type or ResponseType.TEXT.value,
            effective_type=effective_type,
            downgrade_reason=downgrade_reason,
        )
    )
