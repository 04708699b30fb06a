import uuid

from sqlalchemy import Boolean, Column, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.sql import func

from app.database import Base


class WhatsAppGlobalConfig(Base):
    __tablename__ = "whatsapp_global_config"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    api_url = Column(Text, nullable=False)
    api_token = Column(Text, nullable=False)
    is_active = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
