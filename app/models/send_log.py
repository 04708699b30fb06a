import uuid

from sqlalchemy import Boolean, Column, Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.sql import func

from app.database import Base


class ChatbotSendLog(Base):
    __tablename__ = "chatbot_send_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    instance_name = Column(Text, nullable=False)
    contact_phone = Column(Text, nullable=False)
    message_type = Column(Text, nullable=False)  # text, media, buttons, buttons_interactive, list, list_interactive
    success = Column(Boolean, default=False)
    api_status_code = Column(Integer)
    api_response = Column(Text)
    error_message = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
