"""
Tasks periódicas de items
"""
import logging
from app.celery_app import celery_app
from app.services.item_service import expire_food_items
from app.tasks.notification_tasks import enqueue_notification_event, get_session_factory

logger = logging.getLogger(__name__)


@celery_app.task(name="expire_food_items")
def expire_food_items_task():
    """
    Remove itens de comida vencidos e enfileira a notificação de cada remoção.
    """
    db = get_session_factory()()
    try:
        events = expire_food_items(db)
        event_ids = [event.id for event in events]
    finally:
        db.close()

    for outbox_id in event_ids:
        enqueue_notification_event(outbox_id)

    return {"expired": len(event_ids)}
