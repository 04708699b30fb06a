import uuid

from sqlalchemy import Boolean, Column, Integer
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class ChatbotSettings(Base):
    __tablename__ = "chatbot_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    is_enabled = Column(Boolean, default=False)
    response_delay_min = Column(Integer, default=2)
    response_delay_max = Column(Integer, default=5)
    ignore_groups = Column(Boolean, default=True)
    ignore_own_messages = Column(Boolean, default=True)
    typing_enabled = Column(Boolean, default=True)
    typing_duration_min = Column(Integer, default=2)
    typing_duration_max = Column(Integer, default=5)
