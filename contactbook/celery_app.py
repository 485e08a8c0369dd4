"""Celery application configuration."""

from celery import Celery

from contactbook.config import get_settings

settings = get_settings()

app = Celery(
    "contactbook",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["contactbook.tasks.password_reset"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=45,
)
