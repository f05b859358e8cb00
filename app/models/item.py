from sqlalchemy import Column, String, Boolean, DateTime, Float, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
import uuid
from app.database import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    main_category = Column(String(64), nullable=False, index=True)
    sub_category = Column(String(64), nullable=False, default="")
    location = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    contact_number = Column(String(32), nullable=False)
    contact1 = Column(String(32), nullable=True)
    contact2 = Column(String(32), nullable=True)
    owner_id = Column(String(64), nullable=False, index=True)
    # Soft delete: itens removidos ficam com is_active = False
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    image_urls = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    video_url = Column(String(1024), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
