"""
Escrita das notificações in-app (uma linha por destinatário)
"""
import logging
from typing import Any, Dict, Iterable, Optional
from sqlalchemy.orm import Session
from app.models.notification import Notification

logger = logging.getLogger(__name__)


def write_notifications(
    db: Session,
    recipients: Iterable[str],
    notification_type: str,
    title: str,
    body: str,
    payload: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Grava uma notificação por destinatário em um único insert em lote.

    Não faz deduplicação (responsabilidade do resolver). Se o insert falhar a
    escrita inteira é considerada falha.

    Returns:
        True em caso de sucesso (inclusive lista vazia), False se falhar
    """
    user_ids = list(recipients)
    if not user_ids:
        logger.info("No recipients, skipping notification write")
        return True

    notifications = [
        Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            body=body,
            payload=dict(payload) if payload is not None else None,
            is_read=False,
        )
        for user_id in user_ids
    ]

    try:
        db.add_all(notifications)
        db.commit()
    except Exception as e:
        logger.error(f"Error creating bulk notifications: {e}", exc_info=True)
        db.rollback()
        return False

    logger.info(f"Created {len(notifications)} '{notification_type}' notifications")
    return True
