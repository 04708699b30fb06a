from typing import Optional
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.models import ProcessedWebhookMessage


def mark_message_processed(db: Session, seller_id: UUID, message_id: str) -> bool:
    """Record the provider message id. False when it was already recorded."""
    stmt = (
        insert(ProcessedWebhookMessage)
        .values(seller_id=seller_id, message_id=message_id)
        .on_conflict_do_nothing(index_elements=["seller_id", "message_id"])
    )
    result = db.execute(stmt)
    return result.rowcount > 0


def is_duplicate_message(db: Session, seller_id: UUID, message_id: Optional[str]) -> bool:
    """Messages without a provider id are never treated as duplicates."""
    message_id = (message_id or "").strip()
    if not message_id:
        return False
    return not mark_message_processed(db, seller_id, message_id)
