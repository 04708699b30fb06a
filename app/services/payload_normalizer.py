"""Evolution webhook payload normalization.

Evolution/Baileys payloads differ between provider versions and webhook
configurations. The event name, the instance name and the message envelope
are each looked up through an ordered chain of candidates; the first hit wins.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

MESSAGE_EVENT = "messages.upsert"
GROUP_JID_SUFFIX = "@g.us"


class InvalidPayloadError(Exception):
    """Raised when the webhook body is not a JSON object."""

    pass


@dataclass(frozen=True)
class MessageEnvelope:
    """One inbound WhatsApp message as delivered by the provider."""

    remote_jid: str
    from_me: bool = False
    message_id: Optional[str] = None
    push_name: str = ""
    message: Optional[dict] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_group(self) -> bool:
        return is_group_message(self.remote_jid)

    @property
    def phone(self) -> str:
        return extract_phone(self.remote_jid)


@dataclass(frozen=True)
class WebhookEvent:
    event: str
    instance: str
    data: Optional[MessageEnvelope]
    sender: Optional[str] = None

    @property
    def is_message_event(self) -> bool:
        """Events other than messages.upsert are skipped; some providers omit the name."""
        event = (self.event or "").strip().lower()
        return not event or event == MESSAGE_EVENT


def extract_phone(remote_jid: str) -> str:
    """`5511987654321@s.whatsapp.net` -> `5511987654321`."""
    return re.sub(r"\D", "", (remote_jid or "").split("@")[0])


def is_group_message(remote_jid: str) -> bool:
    return GROUP_JID_SUFFIX in (remote_jid or "")


def _dig(value: Any, *path: Any) -> Any:
    for step in path:
        if isinstance(step, int):
            if not isinstance(value, list) or len(value) <= step:
                return None
            value = value[step]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(step)
    return value


def _first_present(raw: dict, paths: tuple[tuple, ...]) -> Any:
    # Only a missing/null value moves on to the next candidate; "" is a hit.
    for path in paths:
        value = _dig(raw, *path)
        if value is not None:
            return value
    return None


EVENT_PATHS = (
    ("event",),
    ("type",),
    ("data", "event"),
    ("data", "type"),
)

INSTANCE_PATHS = (
    ("instance",),
    ("instanceName",),
    ("data", "instance"),
    ("data", "instanceName"),
    ("data", "instance", "instanceName"),
    ("data", "instance", "name"),
    ("instance", "instanceName"),
    ("instance", "name"),
)

ENVELOPE_PATHS = (
    ("data",),
    ("message",),
    ("messages", 0),
    ("data", "data"),
    ("data", "message"),
    ("data", "messages", 0),
    ("data", "messages", 0, "message"),
    ("data", "payload"),
    ("payload",),
)


def build_envelope(candidate: Any) -> Optional[MessageEnvelope]:
    """Envelope from a candidate object, or None when it has no `key.remoteJid`."""
    remote_jid = _dig(candidate, "key", "remoteJid")
    if not remote_jid or not isinstance(remote_jid, str):
        return None

    key = candidate["key"]
    message = candidate.get("message")
    message_id = key.get("id")
    push_name = candidate.get("pushName")
    return MessageEnvelope(
        remote_jid=remote_jid,
        from_me=bool(key.get("fromMe")),
        message_id=str(message_id) if message_id else None,
        push_name=push_name if isinstance(push_name, str) else "",
        message=message if isinstance(message, dict) else None,
        raw=candidate,
    )


def _envelope_at(path: tuple) -> Callable[[dict], Optional[MessageEnvelope]]:
    def extractor(raw: dict) -> Optional[MessageEnvelope]:
        return build_envelope(_dig(raw, *path))

    extractor.__name__ = "envelope_at_" + "_".join(str(step) for step in path)
    return extractor


ENVELOPE_EXTRACTORS: tuple[Callable[[dict], Optional[MessageEnvelope]], ...] = tuple(
    _envelope_at(path) for path in ENVELOPE_PATHS
)


def locate_envelope(raw: dict) -> Optional[MessageEnvelope]:
    for extractor in ENVELOPE_EXTRACTORS:
        envelope = extractor(raw)
        if envelope is not None:
            return envelope
    return None


def _coerce_event(value: Any) -> str:
    if isinstance(value, str):
        return value
    return str(value) if value else ""


def _coerce_instance(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ("instanceName", "name", "instance"):
            candidate = value.get(key)
            if candidate:
                return str(candidate)
        return ""
    return str(value) if value else ""


def normalize_webhook_payload(raw: Any) -> WebhookEvent:
    """Canonical event from any supported payload shape.

    Raises:
        InvalidPayloadError: If the body is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise InvalidPayloadError(f"expected JSON object, got {type(raw).__name__}")

    sender = raw.get("sender")
    return WebhookEvent(
        event=_coerce_event(_first_present(raw, EVENT_PATHS)),
        instance=_coerce_instance(_first_present(raw, INSTANCE_PATHS)).strip(),
        data=locate_envelope(raw),
        sender=sender if isinstance(sender, str) else None,
    )
