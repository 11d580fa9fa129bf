"""
Celery Application Configuration

Configures Celery for background task processing with Redis broker.
Defines the beat schedule for the periodic price alert evaluation pass.

Worker:  celery -A cryptoalert.celery_app worker
Beat:    celery -A cryptoalert.celery_app beat
"""

from celery import Celery

from cryptoalert.config import Settings, load_settings
from cryptoalert.utils.logger import configure_logging
from cryptoalert.utils.schedule import parse_schedule

# Hard limit per evaluation pass; also the lifetime of the pass lock
TASK_TIME_LIMIT = 600


def create_celery_app(settings: Settings) -> Celery:
    """
    Build the Celery app for the given settings.

    Args:
        settings: Validated application settings

    Returns:
        Celery: App with the evaluation pass on the beat schedule
    """
    app = Celery(
        "crypto_alerts",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["cryptoalert.tasks.alert_monitoring"],
    )

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_track_started=True,
        task_time_limit=TASK_TIME_LIMIT,
        worker_prefetch_multiplier=1,  # Process one task at a time
        worker_max_tasks_per_child=100,
    )

    app.conf.beat_schedule = {
        "check-price-alerts": {
            "task": "cryptoalert.tasks.alert_monitoring.check_price_alerts",
            "schedule": parse_schedule(settings.alert_check_interval),
            "options": {
                # A pass not picked up before the next one is due is dropped
                "expires": 240,
            },
        },
    }

    return app


# Worker startup: settings are validated here so a misconfigured worker exits
settings = load_settings()
configure_logging(settings.log_level, settings.log_path)
celery_app = create_celery_app(settings)

if __name__ == "__main__":
    celery_app.start()
