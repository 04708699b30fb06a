from sqlalchemy import Column, PrimaryKeyConstraint, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.sql import func

from app.database import Base


class ProcessedWebhookMessage(Base):
    __tablename__ = "chatbot_processed_messages"
    __table_args__ = (PrimaryKeyConstraint("seller_id", "message_id"),)

    seller_id = Column(UUID(as_uuid=True), nullable=False)
    message_id = Column(Text, nullable=False)
    received_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
