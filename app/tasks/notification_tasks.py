"""
Tasks do Celery para o outbox de notificações
"""
import asyncio
import logging
from typing import Optional
from app.celery_app import celery_app
from app.config import get_settings
from app.database import build_engine, build_session_factory
from app.models.notification_outbox import NotificationOutbox
from app.services.notification_events import claim_outbox_event, claimable_filter, process_outbox_event
from app.services.push_gateway import PushConfigError, PushGatewayClient

logger = logging.getLogger(__name__)

_session_factory = None


def get_session_factory():
    """Session factory do worker (criada na primeira task)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(build_engine(get_settings()))
    return _session_factory


def build_gateway() -> Optional[PushGatewayClient]:
    try:
        return PushGatewayClient.from_settings(get_settings())
    except PushConfigError as e:
        logger.warning(f"Push gateway unavailable: {e}")
        return None


@celery_app.task(name="process_notification_event", bind=True, max_retries=3)
def process_notification_event(self, outbox_id: int):
    """
    Task para processar um evento do outbox (fan-out de notificações).

    Args:
        outbox_id: ID da linha em notification_outbox
    """
    db = get_session_factory()()
    try:
        event = claim_outbox_event(db, outbox_id, get_settings().OUTBOX_STALE_SECONDS)
        if event is None:
            logger.info(f"Outbox event {outbox_id} already claimed or processed")
            return {"status": "skipped", "outbox_id": outbox_id}

        logger.info(f"Processing outbox event {outbox_id} ({event.event_type}, attempt {event.attempts})")
        status = asyncio.run(process_outbox_event(db, event, build_gateway()))
        return {"status": status, "outbox_id": outbox_id}

    except Exception as e:
        logger.error(f"Error processing outbox event {outbox_id}: {e}", exc_info=True)
        # Retry com backoff exponencial
        raise self.retry(exc=e, countdown=2 ** self.request.retries)
    finally:
        db.close()


@celery_app.task(name="drain_notification_outbox")
def drain_notification_outbox():
    """
    Reenfileira eventos pendentes, falhos ou presos em processing que ainda
    têm tentativas.
    """
    settings = get_settings()
    db = get_session_factory()()
    try:
        rows = db.query(NotificationOutbox.id).filter(
            claimable_filter(settings.OUTBOX_STALE_SECONDS),
            NotificationOutbox.attempts < settings.OUTBOX_MAX_ATTEMPTS,
        ).order_by(NotificationOutbox.id).all()

        for (outbox_id,) in rows:
            process_notification_event.delay(outbox_id)

        if rows:
            logger.info(f"Re-enqueued {len(rows)} outbox events")
        return {"enqueued": len(rows)}
    finally:
        db.close()


def enqueue_notification_event(outbox_id: int) -> bool:
    """
    Enfileira o processamento do evento. Falha do broker só é logada: o
    evento continua pendente no outbox e o drain periódico o recupera.
    """
    try:
        process_notification_event.delay(outbox_id)
        return True
    except Exception as e:
        logger.warning(f"Could not enqueue outbox event {outbox_id}: {e}")
        return False
