from sqlalchemy.orm import Session

from app.models import ChatbotRule, ChatbotSettings, SellerInstance, WhatsAppGlobalConfig
from app.schemas.webhook import (
    DiagnosticGlobalConfig,
    DiagnosticInstance,
    DiagnosticResponse,
    DiagnosticRule,
    DiagnosticSettings,
)


def _str_or_none(value):
    return str(value) if value is not None else None


def build_diagnostic_snapshot(db: Session) -> DiagnosticResponse:
    """Operational view of bindings, global config, tenant enablement and rules. Never exposes the API token."""
    instances = db.query(SellerInstance).all()
    global_config = db.query(WhatsAppGlobalConfig).first()
    chatbot_settings = db.query(ChatbotSettings).all()
    rules = db.query(ChatbotRule).all()

    return DiagnosticResponse(
        instances=[
            DiagnosticInstance(
                instance_name=instance.instance_name,
                seller_id=_str_or_none(instance.seller_id),
                is_connected=instance.is_connected,
                instance_blocked=instance.instance_blocked,
                plan_status=instance.plan_status,
            )
            for instance in instances
        ],
        globalConfig=(
            DiagnosticGlobalConfig(api_url=global_config.api_url, is_active=global_config.is_active)
            if global_config
            else None
        ),
        chatbotSettings=[
            DiagnosticSettings(seller_id=_str_or_none(item.seller_id), is_enabled=item.is_enabled)
            for item in chatbot_settings
        ],
        chatbotRules=[
            DiagnosticRule(
                seller_id=_str_or_none(rule.seller_id),
                name=rule.name,
                is_active=rule.is_active,
                trigger_text=rule.trigger_text,
            )
            for rule in rules
        ],
    )
