from app.models.chatbot_contact import ChatbotContact
from app.models.chatbot_interaction import ChatbotInteraction
from app.models.chatbot_rule import ChatbotRule
from app.models.chatbot_settings import ChatbotSettings
from app.models.client import Client
from app.models.global_config import WhatsAppGlobalConfig
from app.models.processed_message import ProcessedWebhookMessage
from app.models.security_audit_log import SecurityAuditLog
from app.models.seller_instance import SellerInstance
from app.models.send_log import ChatbotSendLog

__all__ = [
    "WhatsAppGlobalConfig",
    "SellerInstance",
    "ChatbotSettings",
    "Client",
    "ChatbotContact",
    "ChatbotRule",
    "ChatbotInteraction",
    "ChatbotSendLog",
    "SecurityAuditLog",
    "ProcessedWebhookMessage",
]
