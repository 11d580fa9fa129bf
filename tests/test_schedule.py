import pytest
from celery.schedules import crontab

from cryptoalert.utils.schedule import InvalidScheduleError, parse_schedule


def test_default_cron_expression_runs_every_five_minutes():
    schedule = parse_schedule("*/5 * * * *")

    assert isinstance(schedule, crontab)
    assert schedule.minute == set(range(0, 60, 5))
    assert schedule.hour == set(range(24))


def test_cron_expression_with_hours():
    schedule = parse_schedule("0 9-17 * * 1-5")

    assert schedule.minute == {0}
    assert schedule.hour == set(range(9, 18))
    assert schedule.day_of_week == {1, 2, 3, 4, 5}


def test_plain_number_is_seconds():
    assert parse_schedule("300") == 300.0
    assert parse_schedule(" 90.5 ") == 90.5


@pytest.mark.parametrize("expression", ["", "   ", "0", "-60", "nan", "inf", "-inf", "* * *", "*/5 * * * * *", "61 * * * *"])
def test_invalid_expressions(expression):
    with pytest.raises(InvalidScheduleError):
        parse_schedule(expression)
