"""
Registro de tokens de dispositivo (FCM) por usuário.

Cada linha (user_id, device_token) é mantida como trilha de auditoria: nunca é
apagada, apenas ativada/desativada em rotação de token, logout e re-login.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.database import ConflictError, commit_or_raise
from app.models.device_token import DeviceToken
from app.utils.identity import normalize_user_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveDeviceToken:
    user_id: str
    device_token: str
    platform: str


def token_prefix(token: str, size: int = 20) -> str:
    """Prefixo do token para logs (nunca logar o token inteiro)."""
    return f"{token[:size]}..."


def _deactivate_other_tokens(db: Session, user_id: str, keep_token: str) -> None:
    """Desativa os outros tokens ativos do usuário (best effort)."""
    try:
        updated = db.query(DeviceToken).filter(
            DeviceToken.user_id == user_id,
            DeviceToken.is_active.is_(True),
            DeviceToken.device_token != keep_token,
        ).update(
            {
                DeviceToken.is_active: False,
                DeviceToken.updated_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
        db.commit()
        if updated:
            logger.info(f"Deactivated {updated} previous tokens for user {user_id}")
    except Exception as e:
        logger.warning(f"Could not deactivate other tokens for user {user_id}: {e}")
        db.rollback()


def register_or_refresh(
    db: Session,
    user_id: str,
    token: str,
    platform: str = "android",
) -> bool:
    """
    Registra (ou reativa) o token do dispositivo do usuário.

    - Token já ativo para o usuário: apenas atualiza updated_at (idempotente).
    - Token existente mas inativo: reativa e desativa os demais.
    - Token novo: desativa os demais (best effort) e insere linha ativa.
      Conflito de unicidade no insert significa que outro registro concorrente
      já criou a linha, então conta como sucesso.

    Returns:
        True em caso de sucesso, False se falhar
    """
    token = (token or "").strip()
    if not token:
        logger.warning(f"Empty device token for user {user_id}, ignoring")
        return False
    logger.info(f"Registering device token for user {user_id}: {token_prefix(token)}")

    try:
        existing = db.query(DeviceToken).filter(
            DeviceToken.user_id == user_id,
            DeviceToken.device_token == token,
        ).first()

        if existing:
            now = datetime.now(timezone.utc)
            if existing.is_active:
                existing.updated_at = now
                db.commit()
                logger.info("Token already active, refreshed updated_at")
                return True

            existing.is_active = True
            existing.updated_at = now
            db.commit()
            logger.info("Existing token reactivated")
            _deactivate_other_tokens(db, user_id, token)
            return True

        _deactivate_other_tokens(db, user_id, token)

        db.add(DeviceToken(
            user_id=user_id,
            device_token=token,
            platform=platform,
            is_active=True,
        ))
        commit_or_raise(db)
        logger.info("Device token inserted")
        return True

    except ConflictError:
        logger.info("Token registered concurrently, considering as success")
        return True
    except Exception as e:
        logger.error(f"Error registering device token: {e}", exc_info=True)
        db.rollback()
        return False


def deactivate_all(db: Session, user_id: str) -> bool:
    """
    Desativa todos os tokens do usuário (logout).
    Falhas são logadas e nunca propagadas.
    """
    try:
        updated = db.query(DeviceToken).filter(
            DeviceToken.user_id == user_id,
            DeviceToken.is_active.is_(True),
        ).update(
            {
                DeviceToken.is_active: False,
                DeviceToken.updated_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
        db.commit()
        logger.info(f"Deactivated {updated} tokens for user {user_id}")
        return True
    except Exception as e:
        logger.error(f"Error deactivating tokens for user {user_id}: {e}", exc_info=True)
        db.rollback()
        return False


def list_active_tokens_for(db: Session, user_ids: Iterable[str]) -> List[ActiveDeviceToken]:
    """
    Lista os tokens ativos dos usuários informados, na ordem do registro.
    IDs são comparados normalizados. Se a leitura falhar retorna lista vazia.
    """
    ids = sorted({normalize_user_id(uid) for uid in user_ids} - {""})
    if not ids:
        return []

    try:
        rows = db.query(DeviceToken).filter(
            func.lower(func.trim(DeviceToken.user_id)).in_(ids),
            DeviceToken.is_active.is_(True),
        ).order_by(DeviceToken.id).all()
    except Exception as e:
        logger.error(f"Error fetching device tokens: {e}", exc_info=True)
        db.rollback()
        return []

    return [
        ActiveDeviceToken(
            user_id=row.user_id,
            device_token=row.device_token,
            platform=row.platform,
        )
        for row in rows
    ]
