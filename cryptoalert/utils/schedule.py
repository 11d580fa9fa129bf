"""
Schedule Utility

Turns the operator-supplied ALERT_CHECK_INTERVAL into a Celery beat schedule.
Accepts either a five-field cron expression ("*/5 * * * *") or a plain number
of seconds ("300").
"""

import math
from typing import Union

from celery.schedules import ParseException, crontab

DEFAULT_SCHEDULE = "*/5 * * * *"


class InvalidScheduleError(ValueError):
    """Raised when a schedule expression cannot be parsed."""


def parse_schedule(expression: str) -> Union[crontab, float]:
    """
    Parse a schedule expression.

    Args:
        expression: Cron expression or number of seconds

    Returns:
        crontab or float: Value usable as a beat_schedule "schedule"

    Raises:
        InvalidScheduleError: If the expression is empty, not a positive finite number or
            does not have exactly five cron fields

    Examples:
        "*/5 * * * *" -> crontab(minute="*/5")
        "300"         -> 300.0
    """
    text = (expression or "").strip()
    if not text:
        raise InvalidScheduleError("Schedule expression is empty")

    try:
        seconds = float(text)
    except ValueError:
        seconds = None

    if seconds is not None:
        if not math.isfinite(seconds) or seconds <= 0:
            raise InvalidScheduleError(f"Schedule interval must be a positive finite number: {text}")
        return seconds

    fields = text.split()
    if len(fields) != 5:
        raise InvalidScheduleError(
            f"Cron expression must have 5 fields, got {len(fields)}: {text}"
        )

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
        )
    except (ValueError, ParseException) as e:
        raise InvalidScheduleError(f"Invalid cron expression '{text}': {e}") from e
