from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import ChatbotRule, ChatbotSettings, SellerInstance, WhatsAppGlobalConfig


def get_active_global_config(db: Session) -> Optional[WhatsAppGlobalConfig]:
    return db.query(WhatsAppGlobalConfig).filter(WhatsAppGlobalConfig.is_active.is_(True)).first()


def get_seller_instance(db: Session, instance_name: str) -> Optional[SellerInstance]:
    """Instance binding by name, case-insensitive."""
    return (
        db.query(SellerInstance)
        .filter(func.lower(SellerInstance.instance_name) == instance_name.lower())
        .first()
    )


def default_chatbot_settings(seller_id: UUID) -> ChatbotSettings:
    """Transient settings for a seller who never configured the chatbot (disabled)."""
    return ChatbotSettings(
        seller_id=seller_id,
        is_enabled=False,
        response_delay_min=2,
        response_delay_max=5,
        ignore_groups=True,
        ignore_own_messages=True,
        typing_enabled=True,
        typing_duration_min=2,
        typing_duration_max=5,
    )


def get_chatbot_settings(db: Session, seller_id: UUID) -> ChatbotSettings:
    chatbot_settings = db.query(ChatbotSettings).filter(ChatbotSettings.seller_id == seller_id).first()
    return chatbot_settings or default_chatbot_settings(seller_id)


def get_active_rules(db: Session, seller_id: UUID) -> list[ChatbotRule]:
    return (
        db.query(ChatbotRule)
        .filter(ChatbotRule.seller_id == seller_id, ChatbotRule.is_active.is_(True))
        .order_by(ChatbotRule.priority.desc())
        .all()
    )
