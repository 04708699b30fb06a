import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.sql import func

from app.database import Base


class ChatbotInteraction(Base):
    __tablename__ = "chatbot_interactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    contact_id = Column(UUID(as_uuid=True), ForeignKey("chatbot_contacts.id"), nullable=True)
    rule_id = Column(UUID(as_uuid=True), ForeignKey("chatbot_rules.id"), nullable=True)
    phone = Column(Text, nullable=False)
    incoming_message = Column(Text)
    response_sent = Column(JSONB)
    response_type = Column(Text)
    button_clicked = Column(Text)
    list_selected = Column(Text)
    was_blocked = Column(Boolean, default=False)
    block_reason = Column(Text)
    sent_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
