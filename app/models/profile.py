from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.database import Base


class Profile(Base):
    """Projeção da tabela profiles (usuários conhecidos pelo Supabase Auth)."""
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
