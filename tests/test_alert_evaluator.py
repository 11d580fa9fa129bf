from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from cryptoalert.models.alert import Alert
from cryptoalert.services.alert_evaluator import AlertEvaluator
from cryptoalert.services.price_service import PriceFetchError


def _create(store, coin_id, target, condition, email="user@example.com"):
    return store.create_alert(coin_id, coin_id.title(), Decimal(str(target)), condition, email)


@pytest.mark.parametrize(
    "condition,target,price,expected",
    [
        ("above", "50000", "50000.00", True),
        ("above", "50000", "50000.01", True),
        ("above", "50000", "49999.99", False),
        ("below", "2000", "2000", True),
        ("below", "2000", "1999.5", True),
        ("below", "2000", "2500.00", False),
    ],
)
def test_should_trigger_uses_inclusive_boundaries(condition, target, price, expected):
    alert = Alert(id=1, coin_id="x", target_price=Decimal(target), condition=condition)
    assert AlertEvaluator.should_trigger(alert, Decimal(price)) is expected


def test_should_trigger_unknown_condition_is_false():
    alert = Alert(id=1, coin_id="x", target_price=Decimal("1"), condition="sideways")
    assert AlertEvaluator.should_trigger(alert, Decimal("5")) is False


def test_above_alert_at_target_triggers_and_notifies(store, price_service, notifier, evaluator):
    alert_id = _create(store, "bitcoin", 50000, "above")
    price_service.prices = {"bitcoin": "50000.00"}

    result = evaluator.run_pass()

    assert result["status"] == "success"
    assert result["alerts_triggered"] == 1
    assert result["notifications_sent"] == 1
    assert notifier.sent == [(alert_id, Decimal("50000.00"))]
    assert store.list_active_alerts() == []


def test_below_alert_above_target_stays_eligible(store, price_service, notifier, evaluator):
    alert_id = _create(store, "ethereum", 2000, "below")
    price_service.prices = {"ethereum": "2500.00"}

    result = evaluator.run_pass()

    assert result["alerts_triggered"] == 0
    assert notifier.sent == []
    assert [a.id for a in store.list_active_alerts()] == [alert_id]


def test_coins_are_fetched_in_one_batched_request(store, price_service, evaluator):
    _create(store, "bitcoin", 100000, "above")
    _create(store, "bitcoin", 1, "below")
    _create(store, "ethereum", 100000, "above")
    price_service.prices = {"bitcoin": "50000", "ethereum": "2500"}

    evaluator.run_pass()

    assert price_service.calls == [["bitcoin", "ethereum"]]


def test_missing_price_skips_alert_and_records_history_only_for_priced_coins(
    store, price_service, notifier, evaluator
):
    btc = _create(store, "bitcoin", 40000, "above")
    eth = _create(store, "ethereum", 3000, "below")
    price_service.prices = {"bitcoin": "50000"}

    result = evaluator.run_pass()

    assert result["status"] == "success"
    assert result["coins_priced"] == 1
    assert result["samples_recorded"] == 1
    assert notifier.sent == [(btc, Decimal("50000"))]
    assert [a.id for a in store.list_active_alerts()] == [eth]
    assert len(store.list_price_history("bitcoin")) == 1
    assert store.list_price_history("ethereum") == []


def test_fetch_failure_aborts_pass_without_side_effects(store, price_service, notifier, evaluator):
    alert_id = _create(store, "bitcoin", 1, "above")
    price_service.error = PriceFetchError("timeout")

    result = evaluator.run_pass()

    assert result["status"] == "aborted"
    assert result["reason"] == "price_fetch_failed"
    assert notifier.sent == []
    assert [a.id for a in store.list_active_alerts()] == [alert_id]
    assert store.list_price_history("bitcoin") == []


def test_history_write_failure_is_isolated_per_coin(store, price_service, notifier, evaluator, monkeypatch):
    btc = _create(store, "bitcoin", 1, "above")
    eth = _create(store, "ethereum", 1, "above")
    price_service.prices = {"bitcoin": "50000", "ethereum": "2500"}

    original = store.record_price_sample

    def flaky_record(coin_id, price):
        if coin_id == "bitcoin":
            raise RuntimeError("disk full")
        return original(coin_id, price)

    monkeypatch.setattr(store, "record_price_sample", flaky_record)

    result = evaluator.run_pass()

    assert result["samples_recorded"] == 1
    assert len(store.list_price_history("ethereum")) == 1
    assert sorted(alert_id for alert_id, _ in notifier.sent) == sorted([btc, eth])


def test_notification_failure_keeps_alert_triggered(store, price_service, notifier, evaluator):
    _create(store, "bitcoin", 1, "above")
    price_service.prices = {"bitcoin": "50000"}
    notifier.result = False

    result = evaluator.run_pass()

    assert result["alerts_triggered"] == 1
    assert result["notifications_sent"] == 0
    assert store.list_active_alerts() == []


def test_triggered_alert_fires_only_once(store, price_service, notifier, evaluator):
    _create(store, "bitcoin", 1, "above")
    price_service.prices = {"bitcoin": "50000"}

    evaluator.run_pass()
    second = evaluator.run_pass()

    assert len(notifier.sent) == 1
    assert second["alerts_checked"] == 0
    # No eligible alerts left, so no fetch on the second pass
    assert len(price_service.calls) == 1


def test_deactivated_alert_never_triggers(store, price_service, notifier, evaluator):
    alert_id = _create(store, "bitcoin", 1, "above")
    store.deactivate(alert_id)
    price_service.prices = {"bitcoin": "50000"}

    result = evaluator.run_pass()

    assert result["alerts_checked"] == 0
    assert notifier.sent == []
    assert price_service.calls == []


def test_alert_deactivated_mid_pass_is_not_triggered(store, price_service, notifier, evaluator, monkeypatch):
    alert_id = _create(store, "bitcoin", 1, "above")
    price_service.prices = {"bitcoin": "50000"}

    original = price_service.get_prices

    def fetch_then_deactivate(coin_ids):
        prices = original(coin_ids)
        store.deactivate(alert_id)
        return prices

    monkeypatch.setattr(price_service, "get_prices", fetch_then_deactivate)

    result = evaluator.run_pass()

    assert result["alerts_triggered"] == 0
    assert notifier.sent == []


def test_no_alerts_means_no_fetch(price_service, evaluator):
    result = evaluator.run_pass()

    assert result["status"] == "success"
    assert result["alerts_checked"] == 0
    assert price_service.calls == []


def test_overlapping_pass_is_skipped(store, price_service, evaluator):
    _create(store, "bitcoin", 1, "above")
    price_service.prices = {"bitcoin": "50000"}

    evaluator._pass_lock.acquire()
    try:
        result = evaluator.run_pass()
    finally:
        evaluator._pass_lock.release()

    assert result == {"status": "skipped", "reason": "pass_in_progress"}
    assert price_service.calls == []
    assert len(store.list_active_alerts()) == 1


def test_unexpected_error_is_reported_and_releases_guard(store, evaluator, monkeypatch):
    def broken():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(store, "list_active_alerts", broken)

    result = evaluator.run_pass()

    assert result["status"] == "error"
    assert "database is locked" in result["reason"]
    assert evaluator._pass_lock.acquire(blocking=False)
    evaluator._pass_lock.release()


def test_trigger_write_failure_does_not_block_other_alerts(store, price_service, notifier, evaluator, monkeypatch):
    failing = _create(store, "bitcoin", 1, "above")
    healthy = _create(store, "ethereum", 1, "above")
    price_service.prices = {"bitcoin": "50000", "ethereum": "2500"}

    original = store.mark_triggered

    def flaky_mark(alert_id):
        if alert_id == failing:
            raise OperationalError("UPDATE alerts", {}, Exception("database is locked"))
        return original(alert_id)

    monkeypatch.setattr(store, "mark_triggered", flaky_mark)

    result = evaluator.run_pass()

    assert result["status"] == "success"
    assert result["alerts_triggered"] == 1
    assert notifier.sent == [(healthy, Decimal("2500"))]
    assert [a.id for a in store.list_active_alerts()] == [failing]
