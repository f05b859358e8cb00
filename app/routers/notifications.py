"""
Router para endpoints de notificações in-app
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies.auth import get_current_user
from app.models.notification import Notification
from app.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    MarkReadRequest,
    MarkReadResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _unread_count(db: Session, user_id: str) -> int:
    return db.query(func.count(Notification.id)).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).scalar() or 0


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Lista notificações do usuário, mais recentes primeiro.

    Query params:
    - limit: Número máximo de resultados (padrão: 50, máximo: 100)
    - offset: Número de resultados para pular (padrão: 0)
    - unread_only: Se True, retorna apenas notificações não lidas (padrão: False)
    """
    try:
        query = db.query(Notification).filter(Notification.user_id == user_id)

        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        notifications = query.order_by(
            Notification.created_at.desc(), Notification.id.desc()
        ).limit(limit).offset(offset).all()

        logger.info(f"Listing {len(notifications)} notifications for user {user_id}")

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=_unread_count(db, user_id),
        )

    except Exception as e:
        logger.error(f"Error listing notifications: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error listing notifications"
        )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Quantidade de notificações não lidas (badge)."""
    return UnreadCountResponse(unread_count=_unread_count(db, user_id))


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Marca uma notificação como lida (persistido)."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()

    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)

    return NotificationResponse.model_validate(notification)


@router.post("/notifications/mark-read", response_model=MarkReadResponse)
async def mark_notifications_read(
    request: MarkReadRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Marca notificações como lidas.

    Body:
    {
        "notification_ids": [1, 2, ...]
    }
    """
    try:
        # Só atualiza notificações que pertencem ao usuário
        marked_count = db.query(Notification).filter(
            Notification.id.in_(request.notification_ids),
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        ).update({Notification.is_read: True}, synchronize_session=False)

        db.commit()

        logger.info(f"Marked {marked_count} notifications as read for user {user_id}")

        return MarkReadResponse(success=True, marked_count=marked_count)

    except Exception as e:
        logger.error(f"Error marking notifications as read: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error marking notifications as read"
        )


@router.post("/notifications/mark-all-read", response_model=MarkReadResponse)
async def mark_all_read(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Marca todas as notificações do usuário como lidas."""
    try:
        marked_count = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        ).update({Notification.is_read: True}, synchronize_session=False)
        db.commit()
        return MarkReadResponse(success=True, marked_count=marked_count)
    except Exception as e:
        logger.error(f"Error marking all notifications as read: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error marking notifications as read"
        )


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Remove uma notificação do próprio usuário."""
    deleted = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
