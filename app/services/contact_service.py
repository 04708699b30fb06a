from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.logging_config import get_logger
from app.models import ChatbotContact, Client
from app.schemas.rule import ResponseType
from app.services.contact_status import coerce_status, initial_status, promote_after_response

logger = get_logger("contact_service")

ROSTER_MATCH_DIGITS = 9


def find_roster_client(db: Session, seller_id: UUID, phone: str) -> Optional[Client]:
    """Best-effort roster lookup: any client whose phone contains the last 9 digits.

    Numbers sharing their last 9 digits across area codes will collide.
    """
    suffix = phone[-ROSTER_MATCH_DIGITS:]
    if not suffix:
        return None
    return db.query(Client).filter(Client.seller_id == seller_id, Client.phone.ilike(f"%{suffix}%")).first()


def _find_contact(db: Session, seller_id: UUID, phone: str) -> Optional[ChatbotContact]:
    return db.query(ChatbotContact).filter(ChatbotContact.seller_id == seller_id, ChatbotContact.phone == phone).first()


def get_or_create_contact(
    db: Session, seller_id: UUID, phone: str, display_name: Optional[str] = None, now: Optional[datetime] = None
) -> ChatbotContact:
    """Find contact by (seller, phone) or create it classified against the client roster.

    Lookup never modifies an existing contact.
    """
    contact = _find_contact(db, seller_id, phone)
    if contact:
        return contact

    roster_client = find_roster_client(db, seller_id, phone)
    status = initial_status(roster_client is not None)
    contact = ChatbotContact(
        seller_id=seller_id,
        phone=phone,
        contact_status=status.value,
        client_id=roster_client.id if roster_client else None,
        name=display_name,
        interaction_count=0,
        first_interaction_at=now or datetime.now(timezone.utc),
    )

    try:
        with db.begin_nested():
            db.add(contact)
            db.flush()
    except IntegrityError:
        # Concurrent delivery created the same contact first.
        logger.info("Contact created concurrently, reloading", extra={"context": {"phone": phone}})
        existing = _find_contact(db, seller_id, phone)
        if existing is None:
            raise
        return existing

    logger.info(
        "Contact created",
        extra={"context": {"seller_id": str(seller_id), "phone": phone, "status": status.value}},
    )
    return contact


def update_contact_after_response(
    db: Session,
    contact: ChatbotContact,
    *,
    now: datetime,
    delivered_type: str,
    display_name: Optional[str] = None,
) -> ChatbotContact:
    """Apply a successful send to the contact. Not called for blocked or failed dispatches."""
    contact.last_interaction_at = now
    contact.last_response_at = now
    contact.interaction_count = (contact.interaction_count or 0) + 1
    contact.name = display_name or contact.name
    contact.contact_status = promote_after_response(coerce_status(contact.contact_status)).value

    if delivered_type == ResponseType.TEXT_BUTTONS.value:
        contact.last_buttons_sent_at = now
    elif delivered_type == ResponseType.TEXT_LIST.value:
        contact.last_list_sent_at = now

    db.flush()
    return contact
