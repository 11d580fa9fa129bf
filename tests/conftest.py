import os
import sys
from decimal import Decimal

import pytest

# Ensure repository root is on sys.path so `import cryptoalert` works under pytest
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Keep worker-module imports from writing log files during tests
os.environ.setdefault("LOG_PATH", "")

from cryptoalert.config import Settings  # noqa: E402
from cryptoalert.database import create_db_engine, create_session_factory, init_db  # noqa: E402
from cryptoalert.services.alert_evaluator import AlertEvaluator  # noqa: E402
from cryptoalert.services.alert_store import AlertStore  # noqa: E402


class FakePriceService:
    """Stands in for CoinPriceService; records every batched request."""

    def __init__(self, prices=None, error=None):
        self.prices = dict(prices or {})
        self.error = error
        self.calls = []
        self.coins = [
            {"id": "bitcoin", "symbol": "BTC", "name": "Bitcoin"},
            {"id": "ethereum", "symbol": "ETH", "name": "Ethereum"},
        ]
        self.reachable = True

    def get_prices(self, coin_ids):
        ids = sorted(set(coin_ids))
        self.calls.append(ids)
        if self.error:
            raise self.error
        return {
            coin_id: {"price": Decimal(str(self.prices[coin_id])), "change24h": Decimal("1.5")}
            for coin_id in ids
            if coin_id in self.prices
        }

    def get_price(self, coin_id):
        return self.get_prices([coin_id]).get(coin_id)

    def get_coins(self, limit=None):
        if self.error:
            raise self.error
        return self.coins[:limit] if limit else self.coins

    def ping(self):
        return self.reachable

    def close(self):
        pass


class FakeLock:
    """Stands in for redis.lock.Lock."""

    def __init__(self, acquired=True, acquire_error=None, release_error=None):
        self.acquired = acquired
        self.acquire_error = acquire_error
        self.release_error = release_error
        self.released = False

    def acquire(self, blocking=None):
        if self.acquire_error:
            raise self.acquire_error
        return self.acquired

    def release(self):
        self.released = True
        if self.release_error:
            raise self.release_error


class FakeRedis:
    """Hands out one FakeLock and records every lock request."""

    def __init__(self, lock=None):
        self.pass_lock = lock or FakeLock()
        self.lock_calls = []
        self.closed = False

    def lock(self, name, timeout=None, blocking=None):
        self.lock_calls.append((name, timeout))
        return self.pass_lock

    def close(self):
        self.closed = True


class FakeNotifier:
    """Stands in for EmailNotificationService."""

    def __init__(self, result=True):
        self.result = result
        self.enabled = True
        self.sent = []
        self.test_emails = []
        self.test_error = None

    def notify(self, alert, current_price):
        self.sent.append((alert.id, current_price))
        return self.result

    def send_test_email(self, to_email):
        if self.test_error:
            raise self.test_error
        self.test_emails.append(to_email)
        return True


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_level="DEBUG",
        log_path=None,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return AlertStore(create_session_factory(engine))


@pytest.fixture
def price_service():
    return FakePriceService()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def evaluator(store, price_service, notifier):
    return AlertEvaluator(store, price_service, notifier)
