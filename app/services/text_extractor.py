from dataclasses import dataclass
from typing import Any, Optional

BUTTON_TOKEN_PREFIX = "__BUTTON__:"
LIST_TOKEN_PREFIX = "__LIST__:"

IGNORED_MEDIA_KEYS = ("audioMessage", "videoMessage", "stickerMessage")


@dataclass(frozen=True)
class InteractiveReply:
    kind: str  # button, list
    trigger_id: str


def _present(value: Any) -> bool:
    return isinstance(value, dict) or bool(value)


def _text_at(message: dict, *path: str) -> Optional[str]:
    value: Any = message
    for step in path:
        if not isinstance(value, dict):
            return None
        value = value.get(step)
    if isinstance(value, str) and value:
        return value
    return None


def extract_message_text(message: Optional[dict]) -> Optional[str]:
    """Text token for rule matching, or None when the message can't trigger a rule.

    Button clicks and list selections become `__BUTTON__:<id>` / `__LIST__:<id>`.
    """
    if not isinstance(message, dict):
        return None

    if any(_present(message.get(key)) for key in IGNORED_MEDIA_KEYS):
        return None

    text = _text_at(message, "conversation") or _text_at(message, "extendedTextMessage", "text")
    if text:
        return text

    button_id = _text_at(message, "buttonsResponseMessage", "selectedButtonId") or _text_at(
        message, "templateButtonReplyMessage", "selectedId"
    )
    if button_id:
        return f"{BUTTON_TOKEN_PREFIX}{button_id}"

    row_id = _text_at(message, "listResponseMessage", "singleSelectReply", "selectedRowId")
    if row_id:
        return f"{LIST_TOKEN_PREFIX}{row_id}"

    return None


def parse_interactive_reply(token: str) -> Optional[InteractiveReply]:
    """Split a synthetic button/list token; plain text returns None."""
    if not token:
        return None
    lowered = token.lower()
    for kind, prefix in (("button", BUTTON_TOKEN_PREFIX), ("list", LIST_TOKEN_PREFIX)):
        if lowered.startswith(prefix.lower()):
            return InteractiveReply(kind=kind, trigger_id=token[len(prefix):].strip())
    return None
