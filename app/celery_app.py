"""
Configuração do Celery para processamento em background
"""
from celery import Celery
from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "madadgar",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.notification_tasks", "app.tasks.item_tasks"]
)

# Configurações do Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutos
    task_soft_time_limit=240,  # 4 minutos
    task_publish_retry_policy={
        "max_retries": 2,
        "interval_start": 0,
        "interval_step": 0.5,
        "interval_max": 1,
    },
    beat_schedule={
        "drain-notification-outbox": {
            "task": "drain_notification_outbox",
            "schedule": float(settings.OUTBOX_DRAIN_INTERVAL_SECONDS),
        },
        "expire-food-items": {
            "task": "expire_food_items",
            "schedule": float(settings.FOOD_EXPIRY_INTERVAL_SECONDS),
        },
    },
)
