from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from conftest import text_payload
from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app
from app.schemas.webhook import WebhookResponse
from app.services.payload_normalizer import InvalidPayloadError


@pytest.fixture
def db():
    session = MagicMock()
    app.dependency_overrides[get_db] = lambda: session
    yield session
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    return TestClient(app)


class TestPostWebhook:
    @patch("app.routers.chatbot_webhook.process_webhook", new_callable=AsyncMock)
    def test_sent_response(self, mock_process, client, db):
        mock_process.return_value = WebhookResponse(status="sent", rule="Saudação", type="text")

        response = client.post("/chatbot-webhook", json=text_payload())

        assert response.status_code == 200
        assert response.json() == {"status": "sent", "rule": "Saudação", "type": "text"}
        assert mock_process.call_args[0][1] == text_payload()
        db.commit.assert_called_once()

    @patch("app.routers.chatbot_webhook.process_webhook", new_callable=AsyncMock)
    def test_ignored_is_200(self, mock_process, client, db):
        mock_process.return_value = WebhookResponse.ignored("Group message")

        response = client.post("/chatbot-webhook", json=text_payload())

        assert response.status_code == 200
        assert response.json() == {"status": "ignored", "reason": "Group message"}

    def test_malformed_json_is_400(self, client, db):
        response = client.post(
            "/chatbot-webhook", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"status": "ignored", "reason": "Invalid JSON"}
        db.commit.assert_not_called()

    def test_non_object_json_is_400(self, client, db):
        response = client.post("/chatbot-webhook", json=["a", "b"])

        assert response.status_code == 400
        assert response.json() == {"status": "ignored", "reason": "Invalid JSON"}

    @patch("app.routers.chatbot_webhook.alert_critical")
    @patch("app.routers.chatbot_webhook.process_webhook", new_callable=AsyncMock)
    def test_unexpected_error_is_500(self, mock_process, mock_alert, client, db):
        mock_process.side_effect = RuntimeError("database exploded")

        response = client.post("/chatbot-webhook", json=text_payload())

        assert response.status_code == 500
        assert response.json() == {"error": "database exploded"}
        db.rollback.assert_called_once()
        db.commit.assert_not_called()
        mock_alert.assert_called_once()

    @patch("app.routers.chatbot_webhook.process_webhook", new_callable=AsyncMock)
    def test_invalid_payload_error_is_400(self, mock_process, client, db):
        mock_process.side_effect = InvalidPayloadError("expected JSON object")

        response = client.post("/chatbot-webhook", json={"x": 1})

        assert response.status_code == 400


class TestDiagnostic:
    def test_snapshot_hides_token(self, client, db):
        seller_id = uuid4()
        instance = SimpleNamespace(
            instance_name="loja-1", seller_id=seller_id, is_connected=True, instance_blocked=False, plan_status="active"
        )
        global_config = SimpleNamespace(api_url="https://evo.example.com", api_token="secret", is_active=True)
        chatbot_settings = SimpleNamespace(seller_id=seller_id, is_enabled=True)
        rule = SimpleNamespace(seller_id=seller_id, name="Saudação", is_active=True, trigger_text="oi")
        db.query.return_value.all.side_effect = [[instance], [chatbot_settings], [rule]]
        db.query.return_value.first.return_value = global_config

        response = client.get("/chatbot-webhook")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "diagnostic"
        assert body["instances"][0]["instance_name"] == "loja-1"
        assert body["instances"][0]["seller_id"] == str(seller_id)
        assert body["globalConfig"] == {"api_url": "https://evo.example.com", "is_active": True}
        assert body["chatbotSettings"] == [{"seller_id": str(seller_id), "is_enabled": True}]
        assert body["chatbotRules"][0]["trigger_text"] == "oi"
        assert "secret" not in response.text

    def test_empty_snapshot(self, client, db):
        db.query.return_value.all.return_value = []
        db.query.return_value.first.return_value = None

        body = client.get("/chatbot-webhook").json()

        assert body == {
            "status": "diagnostic",
            "instances": [],
            "globalConfig": None,
            "chatbotSettings": [],
            "chatbotRules": [],
        }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
