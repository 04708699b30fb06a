from unittest.mock import MagicMock, Mock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from app.models import ChatbotInteraction, ChatbotSendLog, SecurityAuditLog
from app.services.audit_service import audit_webhook
from app.services.dedup_service import is_duplicate_message
from app.services.evolution_service import ProviderAttempt
from app.services.interaction_service import record_interaction, record_send_attempt

SELLER_ID = uuid4()


class TestDedup:
    def test_first_delivery_is_not_duplicate(self):
        db = Mock()
        db.execute.return_value.rowcount = 1

        assert is_duplicate_message(db, SELLER_ID, "MSG-1") is False
        db.execute.assert_called_once()

    def test_redelivery_is_duplicate(self):
        db = Mock()
        db.execute.return_value.rowcount = 0

        assert is_duplicate_message(db, SELLER_ID, "MSG-1") is True

    def test_message_without_id_is_processed(self):
        db = Mock()

        assert is_duplicate_message(db, SELLER_ID, None) is False
        assert is_duplicate_message(db, SELLER_ID, "  ") is False
        db.execute.assert_not_called()


class TestAudit:
    def test_writes_audit_row(self):
        db = MagicMock()

        ok = audit_webhook(db, "loja-1", {"event": "messages.upsert"}, outcome={"status": "sent"})

        assert ok is True
        row = db.add.call_args[0][0]
        assert isinstance(row, SecurityAuditLog)
        assert row.action == "chatbot_webhook"
        assert row.table_name == "chatbot_webhook"
        assert row.record_id == "loja-1"
        assert row.new_data == {"payload": {"event": "messages.upsert"}, "outcome": {"status": "sent"}}

    def test_failure_is_swallowed(self):
        db = MagicMock()
        db.flush.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        assert audit_webhook(db, "loja-1", {"x": 1}) is False

    def test_non_json_values_are_encoded(self):
        db = MagicMock()
        audit_webhook(db, None, {"id": SELLER_ID})

        row = db.add.call_args[0][0]
        assert row.record_id is None
        assert row.new_data == {"payload": {"id": str(SELLER_ID)}}


class TestRecordInteraction:
    def test_button_click_is_recorded(self):
        db = Mock()
        contact = Mock(id=uuid4())
        rule = Mock(id=uuid4())

        interaction = record_interaction(
            db,
            seller_id=SELLER_ID,
            phone="5511987654321",
            incoming_message="__BUTTON__:planos",
            contact=contact,
            rule=rule,
            response_sent={"number": "5511987654321", "text": "x"},
            response_type="text",
        )

        assert isinstance(interaction, ChatbotInteraction)
        assert interaction.button_clicked == "planos"
        assert interaction.list_selected is None
        assert interaction.contact_id == contact.id
        assert interaction.rule_id == rule.id
        assert interaction.was_blocked is False
        db.add.assert_called_once_with(interaction)

    def test_blocked_without_rule(self):
        interaction = record_interaction(
            Mock(),
            seller_id=SELLER_ID,
            phone="5511987654321",
            incoming_message="__LIST__:anual",
            was_blocked=True,
            block_reason="No matching rule",
        )

        assert interaction.rule_id is None
        assert interaction.list_selected == "anual"
        assert interaction.block_reason == "No matching rule"


class TestRecordSendAttempt:
    def test_writes_send_log(self):
        db = MagicMock()
        attempt = ProviderAttempt(message_type="list", phone="5511987654321", success=False, status_code=500, response_text="boom")

        record_send_attempt(db, SELLER_ID, "loja-1", attempt)

        row = db.add.call_args[0][0]
        assert isinstance(row, ChatbotSendLog)
        assert row.instance_name == "loja-1"
        assert row.message_type == "list"
        assert row.success is False
        assert row.api_status_code == 500
        assert row.api_response == "boom"

    def test_write_failure_is_swallowed(self):
        db = MagicMock()
        db.flush.side_effect = OperationalError("INSERT", {}, Exception("db down"))
        attempt = ProviderAttempt(message_type="text", phone="1", success=True)

        record_send_attempt(db, SELLER_ID, "loja-1", attempt)
