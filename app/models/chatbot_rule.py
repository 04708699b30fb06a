import uuid

from sqlalchemy import Boolean, Column, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

from app.database import Base


class ChatbotRule(Base):
    __tablename__ = "chatbot_rules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(Text, nullable=False)
    trigger_text = Column(Text, nullable=False)  # phrase, or "*", "**", "***" for global rules
    response_type = Column(Text, default="text")  # text, text_image, text_buttons, text_list
    response_content = Column(JSONB, nullable=False, default=dict)
    contact_filter = Column(Text, default="ALL")  # ALL, NEW, KNOWN, CLIENT
    cooldown_mode = Column(Text, default="polite")  # polite, moderate, free
    cooldown_hours = Column(Integer, default=24)
    is_active = Column(Boolean, default=True)
    is_global_trigger = Column(Boolean, default=False)
    priority = Column(Integer, default=0)
    created_at = Column(TIMESTAMP(timezone=True))
    updated_at = Column(TIMESTAMP(timezone=True))
