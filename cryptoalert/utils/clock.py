"""
Clock Utility

Timezone-aware timestamps for persisted records.
"""

from datetime import datetime

import pytz


def utcnow() -> datetime:
    """
    Get current time in UTC.

    Returns:
        datetime: Current datetime in the UTC timezone
    """
    return datetime.now(pytz.utc)
