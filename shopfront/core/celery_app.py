"""Celery application configuration"""

from celery import Celery
from kombu import Exchange, Queue
from shopfront.core.config import settings

# Create Celery app
celery_app = Celery(
    "shopfront",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "shopfront.tasks.payment_tasks",
    ]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_acks_late=True,
    worker_prefetch_multiplier=1,

    task_routes={
        "shopfront.tasks.payment_tasks.*": {"queue": "payments"},
    },

    task_default_queue="default",
    result_expires=3600,  # 1 hour
)

celery_app.conf.task_queues = (
    Queue("default", Exchange("default"), routing_key="default"),
    Queue("payments", Exchange("payments"), routing_key="payments"),
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "expire-stale-payments": {
        "task": "shopfront.tasks.payment_tasks.expire_stale_payments",
        "schedule": settings.PAYMENT_SWEEP_INTERVAL_SECONDS,
        "options": {"queue": "payments"}
    },
}
