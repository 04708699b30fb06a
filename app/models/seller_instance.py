import uuid

from sqlalchemy import Boolean, Column, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from app.database import Base


class SellerInstance(Base):
    __tablename__ = "whatsapp_seller_instances"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    instance_name = Column(Text, nullable=False)
    is_connected = Column(Boolean, default=False)
    instance_blocked = Column(Boolean, nullable=False, default=False)
    blocked_reason = Column(Text)
    plan_status = Column(Text, nullable=False, default="active")  # active, trial, expired
    plan_expires_at = Column(TIMESTAMP(timezone=True))
    last_connection_check = Column(TIMESTAMP(timezone=True))
