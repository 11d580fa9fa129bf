"""
Service Wiring

build_services() constructs every component once from Settings; the FastAPI
app keeps the container on app.state and the Celery task builds one per run.
The get_* functions are FastAPI dependencies reading from that container.
The redis client is created lazily; no connection is made until first use.
"""

from dataclasses import dataclass
from typing import Optional

import redis
from fastapi import Request
from redis import Redis as RedisClient
from sqlalchemy.engine import Engine

from cryptoalert.config import Settings
from cryptoalert.database import create_db_engine, create_session_factory
from cryptoalert.services.alert_evaluator import AlertEvaluator
from cryptoalert.services.alert_store import AlertStore
from cryptoalert.services.notification_service import EmailNotificationService
from cryptoalert.services.price_service import CoinPriceService


@dataclass
class ServiceContainer:
    """All long-lived components of one process."""

    settings: Settings
    engine: Engine
    store: AlertStore
    price_service: CoinPriceService
    notifier: EmailNotificationService
    evaluator: AlertEvaluator
    redis_client: Optional[RedisClient] = None

    def close(self):
        self.price_service.close()
        self.engine.dispose()
        if self.redis_client is not None:
            self.redis_client.close()


def build_services(settings: Settings) -> ServiceContainer:
    """
    Construct the service graph.

    Args:
        settings: Validated application settings

    Returns:
        ServiceContainer: Wired components
    """
    engine = create_db_engine(settings.database_url)
    store = AlertStore(create_session_factory(engine))
    price_service = CoinPriceService(settings.coingecko_api_url, timeout=settings.api_timeout)
    notifier = EmailNotificationService(settings)
    evaluator = AlertEvaluator(store, price_service, notifier)

    return ServiceContainer(
        settings=settings,
        engine=engine,
        store=store,
        price_service=price_service,
        notifier=notifier,
        evaluator=evaluator,
        redis_client=get_redis_client(settings),
    )


def get_redis_client(settings: Settings) -> RedisClient:
    """
    Provide a redis client instance.

    Return:
        RedisClient: A redis client configured with the application's host params.
    """
    return redis.StrictRedis(
        host=settings.redis_hostname,
        port=settings.redis_port,
        decode_responses=True,
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.services.settings


def get_store(request: Request) -> AlertStore:
    return request.app.state.services.store


def get_price_service(request: Request) -> CoinPriceService:
    return request.app.state.services.price_service


def get_notifier(request: Request) -> EmailNotificationService:
    return request.app.state.services.notifier


def get_evaluator(request: Request) -> AlertEvaluator:
    return request.app.state.services.evaluator


def get_redis(request: Request) -> RedisClient:
    return request.app.state.services.redis_client
