import pytest

from app.services.payload_normalizer import (
    ENVELOPE_EXTRACTORS,
    InvalidPayloadError,
    build_envelope,
    extract_phone,
    is_group_message,
    locate_envelope,
    normalize_webhook_payload,
)

ENVELOPE = {
    "key": {"remoteJid": "5511987654321@s.whatsapp.net", "fromMe": False, "id": "ABC123"},
    "pushName": "Maria",
    "message": {"conversation": "oi"},
}


class TestNormalizeWebhookPayload:
    def test_standard_messages_upsert(self):
        event = normalize_webhook_payload({"event": "messages.upsert", "instance": "loja-1", "data": ENVELOPE})

        assert event.event == "messages.upsert"
        assert event.instance == "loja-1"
        assert event.is_message_event is True
        assert event.data.remote_jid == "5511987654321@s.whatsapp.net"
        assert event.data.message_id == "ABC123"
        assert event.data.push_name == "Maria"
        assert event.data.phone == "5511987654321"

    def test_instance_as_nested_object(self):
        event = normalize_webhook_payload({"event": "messages.upsert", "instance": {"instanceName": "loja-2"}, "data": ENVELOPE})
        assert event.instance == "loja-2"

    def test_instance_object_with_name_key(self):
        event = normalize_webhook_payload({"instance": {"name": "loja-3"}, "data": ENVELOPE})
        assert event.instance == "loja-3"

    def test_instance_name_top_level_key(self):
        event = normalize_webhook_payload({"instanceName": "  loja-4 ", "data": ENVELOPE})
        assert event.instance == "loja-4"

    def test_envelope_in_messages_array(self):
        event = normalize_webhook_payload({"event": "messages.upsert", "instance": "x", "data": {"messages": [ENVELOPE]}})
        assert event.data is not None
        assert event.data.message == {"conversation": "oi"}

    def test_envelope_under_top_level_message(self):
        event = normalize_webhook_payload({"instance": "x", "message": ENVELOPE})
        assert event.data.remote_jid == "5511987654321@s.whatsapp.net"

    def test_data_without_key_skips_to_next_candidate(self):
        raw = {"instance": "x", "data": {"something": "else", "message": ENVELOPE}}
        event = normalize_webhook_payload(raw)
        assert event.data.message_id == "ABC123"

    def test_no_envelope_found(self):
        event = normalize_webhook_payload({"event": "messages.upsert", "instance": "x", "data": {"foo": 1}})
        assert event.data is None

    def test_missing_event_counts_as_message_event(self):
        event = normalize_webhook_payload({"instance": "x", "data": ENVELOPE})
        assert event.event == ""
        assert event.is_message_event is True

    def test_event_name_is_case_insensitive(self):
        event = normalize_webhook_payload({"event": "MESSAGES.UPSERT", "instance": "x", "data": ENVELOPE})
        assert event.is_message_event is True

    def test_other_events_are_not_message_events(self):
        event = normalize_webhook_payload({"event": "connection.update", "instance": "x", "data": {"state": "open"}})
        assert event.is_message_event is False

    @pytest.mark.parametrize("raw", [[], "text", 42, None])
    def test_non_object_body_is_rejected(self, raw):
        with pytest.raises(InvalidPayloadError):
            normalize_webhook_payload(raw)

    def test_same_input_gives_same_event(self):
        raw = {"event": "messages.upsert", "instance": "x", "data": ENVELOPE}
        assert normalize_webhook_payload(raw) == normalize_webhook_payload(raw)


class TestEnvelopeHelpers:
    def test_build_envelope_requires_remote_jid(self):
        assert build_envelope({"key": {"id": "1"}}) is None
        assert build_envelope("not a dict") is None

    def test_from_me_flag(self):
        envelope = build_envelope({"key": {"remoteJid": "1@s.whatsapp.net", "fromMe": True}})
        assert envelope.from_me is True

    def test_extractors_are_tried_in_order(self):
        raw = {
            "data": {"key": {"remoteJid": "first@s.whatsapp.net"}},
            "message": {"key": {"remoteJid": "second@s.whatsapp.net"}},
        }
        assert locate_envelope(raw).remote_jid == "first@s.whatsapp.net"
        assert len(ENVELOPE_EXTRACTORS) > 3

    def test_extract_phone(self):
        assert extract_phone("5511987654321@s.whatsapp.net") == "5511987654321"
        assert extract_phone("55 (11) 98765-4321@c.us") == "5511987654321"
        assert extract_phone("") == ""

    def test_is_group_message(self):
        assert is_group_message("120363000000@g.us") is True
        assert is_group_message("5511987654321@s.whatsapp.net") is False
