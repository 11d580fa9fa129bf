"""
Alert Monitoring Background Tasks

check_price_alerts runs one evaluation pass on the beat schedule
(default: every 5 minutes). The Redis pass lock keeps passes from
overlapping when a pass outlasts the interval, several workers are
running, or an on-demand pass is in flight.
"""

from cryptoalert.celery_app import TASK_TIME_LIMIT, celery_app, settings
from cryptoalert.dependencies import build_services
from cryptoalert.services.pass_guard import run_guarded_pass
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)


@celery_app.task(bind=True)
def check_price_alerts(self):
    """
    Evaluate all active price alerts.

    - Fetches prices for every coin with an active alert in one request
    - Records price history
    - Triggers matching alerts and e-mails their owners

    No retry: a failed pass is simply followed by the next scheduled one.
    """
    services = build_services(settings)

    try:
        result = run_guarded_pass(services.evaluator, services.redis_client, lock_timeout=TASK_TIME_LIMIT)
        logger.info(f"Evaluation pass finished: {result}")
        return result

    finally:
        services.close()
