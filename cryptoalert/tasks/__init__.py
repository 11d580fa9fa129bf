"""
Background Tasks

Celery tasks for periodic price alert evaluation.
"""

from cryptoalert.tasks.alert_monitoring import check_price_alerts

__all__ = ["check_price_alerts"]
