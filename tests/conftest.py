from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def build_rule(**overrides):
    rule = SimpleNamespace(
        id=uuid4(),
        seller_id=uuid4(),
        name="Rule",
        trigger_text="oi",
        response_type="text",
        response_content={"text": "Olá!"},
        contact_filter="ALL",
        cooldown_mode="polite",
        cooldown_hours=24,
        is_active=True,
        is_global_trigger=False,
        priority=0,
    )
    for key, value in overrides.items():
        setattr(rule, key, value)
    return rule


def build_contact(**overrides):
    contact = SimpleNamespace(
        id=uuid4(),
        seller_id=uuid4(),
        phone="5511987654321",
        contact_status="NEW",
        client_id=None,
        name=None,
        interaction_count=0,
        last_interaction_at=None,
        last_response_at=None,
        last_buttons_sent_at=None,
        last_list_sent_at=None,
    )
    for key, value in overrides.items():
        setattr(contact, key, value)
    return contact


def text_payload(text="Oi, bom dia", *, instance="loja-1", remote_jid="5511987654321@s.whatsapp.net", **key):
    """Evolution `messages.upsert` payload with a plain conversation message."""
    return {
        "event": "messages.upsert",
        "instance": instance,
        "data": {
            "key": {"remoteJid": remote_jid, "fromMe": False, "id": "MSG-1", **key},
            "pushName": "Maria",
            "message": {"conversation": text},
        },
    }
