from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.logging_config import get_logger
from app.models import ChatbotContact, ChatbotInteraction, ChatbotRule, ChatbotSendLog
from app.services.evolution_service import ProviderAttempt
from app.services.text_extractor import parse_interactive_reply

logger = get_logger("interaction_service")

SEND_LOG_RESPONSE_CHARS = 1000


def record_interaction(
    db: Session,
    *,
    seller_id: UUID,
    phone: str,
    incoming_message: str,
    contact: Optional[ChatbotContact] = None,
    rule: Optional[ChatbotRule] = None,
    response_sent: Optional[dict] = None,
    response_type: Optional[str] = None,
    was_blocked: bool = False,
    block_reason: Optional[str] = None,
) -> ChatbotInteraction:
    """Append one interaction row for a terminal outcome."""
    reply = parse_interactive_reply(incoming_message)
    interaction = ChatbotInteraction(
        seller_id=seller_id,
        contact_id=contact.id if contact else None,
        rule_id=rule.id if rule else None,
        phone=phone,
        incoming_message=incoming_message,
        response_sent=response_sent,
        response_type=response_type,
        button_clicked=reply.trigger_id if reply and reply.kind == "button" else None,
        list_selected=reply.trigger_id if reply and reply.kind == "list" else None,
        was_blocked=was_blocked,
        block_reason=block_reason,
    )
    db.add(interaction)
    db.flush()
    return interaction


def record_send_attempt(db: Session, seller_id: UUID, instance_name: str, attempt: ProviderAttempt) -> None:
    """Append a send log row. Best-effort: a failed write is logged, never raised."""
    try:
        with db.begin_nested():
            db.add(
                ChatbotSendLog(
                    seller_id=seller_id,
                    instance_name=instance_name,
                    contact_phone=attempt.phone,
                    message_type=attempt.message_type,
                    success=attempt.success,
                    api_status_code=attempt.status_code,
                    api_response=(attempt.response_text or "")[:SEND_LOG_RESPONSE_CHARS] or None,
                    error_message=attempt.error,
                )
            )
            db.flush()
    except Exception as e:
        logger.warning(f"Send log write failed: {e}", extra={"context": {"phone": attempt.phone}})
