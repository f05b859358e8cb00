"""
Eventos de notificação disparados por escritas em items.

A escrita principal grava o item e uma linha no outbox na mesma transação; o
worker do Celery consome o outbox e executa resolver -> writer -> dispatcher.
Nada aqui pode falhar a escrita principal.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Tuple
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from app.models.item import Item
from app.models.notification_outbox import (
    NotificationOutbox,
    OUTBOX_PENDING,
    OUTBOX_PROCESSING,
    OUTBOX_DONE,
    OUTBOX_FAILED,
)
from app.schemas.notification import NotificationType
from app.services.notification_writer import write_notifications
from app.services.push_dispatcher import PushDispatcher
from app.services.push_gateway import PushGatewayClient
from app.services.recipient_resolver import resolve_recipients
from app.utils.identity import exclude_actor

logger = logging.getLogger(__name__)

DEFAULT_DELETION_REASON = "Post removed by owner"


def build_item_payload(
    item: Item,
    uploader_id: Optional[str] = None,
    deletion_reason: Optional[str] = None,
    deleted_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Payload estruturado da notificação a partir do item."""
    payload: Dict[str, Any] = {
        "item_id": item.id,
        "category": item.main_category,
        "subcategory": item.sub_category or "",
        "location": item.location,
        "title": item.title,
        "uploader_id": uploader_id or item.owner_id,
    }
    if deletion_reason is not None:
        payload["deletion_reason"] = deletion_reason
        payload["deleted_at"] = (deleted_at or datetime.now(timezone.utc)).isoformat()
    return payload


def notification_content(event_type: str, payload: Dict[str, Any]) -> Tuple[str, str]:
    """Título e corpo exibidos para cada tipo de evento."""
    if event_type == NotificationType.POST_DELETED.value:
        return (
            "Post No Longer Available",
            f"{payload.get('title', '')} has been removed from {payload.get('location', '')}",
        )
    return (
        f"New {payload.get('category', '')} Available",
        f"{payload.get('title', '')} has been shared in {payload.get('location', '')}",
    )


def add_outbox_event(
    db: Session,
    event_type: NotificationType,
    item: Item,
    actor_id: str,
    deletion_reason: Optional[str] = None,
) -> NotificationOutbox:
    """
    Adiciona o evento à sessão sem fazer commit: quem chama faz commit junto
    com a escrita do item.
    """
    if event_type == NotificationType.POST_DELETED:
        payload = build_item_payload(item, actor_id, deletion_reason or DEFAULT_DELETION_REASON)
    else:
        payload = build_item_payload(item, actor_id)

    event = NotificationOutbox(
        event_type=event_type.value,
        item_id=item.id,
        actor_id=actor_id,
        payload=payload,
        status=OUTBOX_PENDING,
        attempts=0,
    )
    db.add(event)
    return event


def claimable_filter(stale_seconds: int, now: Optional[datetime] = None):
    """
    Condição dos eventos que podem ser (re)processados: pendentes, falhos ou
    presos em processing desde antes de now - stale_seconds (worker morto ou
    task interrompida pelo time limit). processing sem claimed_at também conta
    como preso.
    """
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(seconds=stale_seconds)
    return or_(
        NotificationOutbox.status.in_([OUTBOX_PENDING, OUTBOX_FAILED]),
        and_(
            NotificationOutbox.status == OUTBOX_PROCESSING,
            or_(
                NotificationOutbox.claimed_at.is_(None),
                NotificationOutbox.claimed_at < cutoff,
            ),
        ),
    )


def claim_outbox_event(db: Session, outbox_id: int, stale_seconds: int = 900) -> Optional[NotificationOutbox]:
    """
    Marca o evento como em processamento se ainda estiver pendente, falho ou
    preso em processing há mais de stale_seconds.
    Retorna None se outro worker já pegou (ou concluiu) o evento.
    """
    now = datetime.now(timezone.utc)
    claimed = db.query(NotificationOutbox).filter(
        NotificationOutbox.id == outbox_id,
        claimable_filter(stale_seconds, now),
    ).update(
        {
            NotificationOutbox.status: OUTBOX_PROCESSING,
            NotificationOutbox.attempts: NotificationOutbox.attempts + 1,
            NotificationOutbox.claimed_at: now,
        },
        synchronize_session=False,
    )
    db.commit()
    if not claimed:
        return None
    return db.get(NotificationOutbox, outbox_id)


def _finish(db: Session, event: NotificationOutbox, status: str, error: Optional[str] = None) -> str:
    try:
        event.status = status
        event.last_error = error
        event.processed_at = datetime.now(timezone.utc)
        db.commit()
    except Exception as e:
        logger.error(f"Could not update outbox event {event.id}: {e}", exc_info=True)
        db.rollback()
    return status


async def process_outbox_event(
    db: Session,
    event: NotificationOutbox,
    gateway: Optional[PushGatewayClient],
) -> str:
    """
    Executa o fan-out de um evento: destinatários, notificações in-app e push.

    Falha na gravação das notificações deixa o evento como failed (pode ser
    reprocessado, o insert é atômico). Depois da gravação, erros de push ficam
    só no last_error, para não duplicar notificações num reprocessamento.

    Returns:
        status final do evento
    """
    try:
        payload = dict(event.payload or {})
        title, body = notification_content(event.event_type, payload)

        recipients = resolve_recipients(db, event.actor_id)
        # Reaplica a exclusão do autor: o ID do provedor de identidade pode
        # chegar com formato diferente do gravado em profiles/tokens
        recipients = exclude_actor(recipients, event.actor_id)

        if not recipients:
            logger.info(f"No other users to notify for outbox event {event.id}")
            return _finish(db, event, OUTBOX_DONE)

        user_ids = sorted(recipients)
        if not write_notifications(db, user_ids, event.event_type, title, body, payload):
            return _finish(db, event, OUTBOX_FAILED, "notification write failed")

        if gateway is None:
            logger.warning(f"Push gateway not configured, skipping push for outbox event {event.id}")
            return _finish(db, event, OUTBOX_DONE, "push gateway not configured")

        dispatcher = PushDispatcher(db, gateway)
        result = await dispatcher.dispatch(user_ids, title, body, event.event_type, payload)
        logger.info(f"Outbox event {event.id}: {result.message}")

        error = None
        if result.failure_count:
            error = f"{result.failure_count} push deliveries failed"
        return _finish(db, event, OUTBOX_DONE, error)

    except Exception as e:
        logger.error(f"Error processing outbox event {event.id}: {e}", exc_info=True)
        db.rollback()
        return _finish(db, event, OUTBOX_FAILED, str(e))


def create_system_alert(
    db: Session,
    user_ids: Iterable[str],
    title: str,
    body: str,
    payload: Optional[Dict[str, Any]] = None,
) -> bool:
    """Cria notificações de alerta do sistema para os usuários informados."""
    try:
        ids = list(user_ids)
        logger.info(f"Creating system alert for {len(ids)} users: {title}")
        return write_notifications(db, ids, NotificationType.SYSTEM_ALERT.value, title, body, payload)
    except Exception as e:
        logger.error(f"Error creating system alert: {e}", exc_info=True)
        return False
