"""Log agregado de cada execução do disparo de push (append-only)."""
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from app.database import Base


class NotificationSendLog(Base):
    __tablename__ = "notification_send_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_ids = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)
    success_count = Column(Integer, nullable=False, default=0)
    failure_count = Column(Integer, nullable=False, default=0)
    # [{token: <prefixo>, success: bool, error?: str}]
    results = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
