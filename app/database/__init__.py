"""
Módulo de database: engine, sessões e classificação de erros de escrita
"""
import logging
import sqlite3
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings

logger = logging.getLogger(__name__)

# Base para os models
Base = declarative_base()

# SQLSTATE do Postgres para unique_violation
PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_CODES = {
    getattr(sqlite3, "SQLITE_CONSTRAINT_UNIQUE", 2067),
    getattr(sqlite3, "SQLITE_CONSTRAINT_PRIMARYKEY", 1555),
}


class DataAccessError(Exception):
    """Erro genérico da camada de dados"""
    pass


class ConflictError(DataAccessError):
    """Violação de unicidade (registro já existe)"""
    pass


def build_engine(settings: Settings) -> Engine:
    """
    Cria o engine do SQLAlchemy a partir das settings recebidas.
    SQLite em memória usa StaticPool para compartilhar a conexão entre threads.
    """
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.DEBUG,
        pool_size=5,
        max_overflow=10,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    orig = exc.orig
    # psycopg2 expõe pgcode, psycopg 3 expõe sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    """Classifica o IntegrityError pelo código do driver, nunca pela mensagem."""
    if _sqlstate(exc) == PG_UNIQUE_VIOLATION:
        return True
    return getattr(exc.orig, "sqlite_errorcode", None) in SQLITE_UNIQUE_CODES


def commit_or_raise(db: Session) -> None:
    """
    Faz commit da sessão convertendo erros de integridade em exceções tipadas.

    Raises:
        ConflictError: violação de unicidade
        DataAccessError: qualquer outro erro de integridade
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise ConflictError(str(e.orig)) from e
        raise DataAccessError(str(e.orig)) from e


# Dependency para obter a sessão do banco
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "Base",
    "ConflictError",
    "DataAccessError",
    "build_engine",
    "build_session_factory",
    "commit_or_raise",
    "get_db",
    "is_unique_violation",
]
