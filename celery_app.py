"""Celery application configuration for FlowMarine background tasks."""

from celery import Celery

from flowmarine.config import settings

celery = Celery("flowmarine")

celery.conf.update(
    broker_url=settings.celery_broker_url,
    result_backend=settings.celery_result_backend,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_routes={
        "flowmarine.modules.rfq.tasks.*": {"queue": "rfq-notifications"},
    },
    # --- Reliability settings ---
    task_default_retry_delay=60,
    task_max_retries=3,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=86400,  # 24 hours
    broker_transport_options={
        "max_retries": 10,
        "interval_start": 0.2,
        "interval_step": 0.5,
        "interval_max": 5.0,
        "retry_on_timeout": True,
        "visibility_timeout": 3600,
    },
    beat_schedule={
        "rfq-retry-failed-notifications": {
            "task": "flowmarine.modules.rfq.tasks.retry_failed_notifications",
            "schedule": settings.notification_retry_poll_seconds,
        },
    },
)

celery.autodiscover_tasks(["flowmarine.modules.rfq"])
