import uuid

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.sql import func

from app.database import Base


class ChatbotContact(Base):
    __tablename__ = "chatbot_contacts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    phone = Column(Text, nullable=False)  # digits only
    contact_status = Column(Text, default="NEW")  # NEW, KNOWN, CLIENT
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True)
    name = Column(Text)
    interaction_count = Column(Integer, default=0)
    first_interaction_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    last_interaction_at = Column(TIMESTAMP(timezone=True))
    last_response_at = Column(TIMESTAMP(timezone=True))
    last_buttons_sent_at = Column(TIMESTAMP(timezone=True))
    last_list_sent_at = Column(TIMESTAMP(timezone=True))
