from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from app.database import Base


class Client(Base):
    """Seller's client roster; read-only here, used to classify new contacts."""

    __tablename__ = "clients"

    id = Column(UUID(as_uuid=True), primary_key=True)
    seller_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(Text, nullable=False)
    phone = Column(Text)
    expiration_date = Column(TIMESTAMP(timezone=True))
