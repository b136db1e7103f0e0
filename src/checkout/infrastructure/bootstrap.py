"""Composition root.

Builds the SQLAlchemy engine, payment adapters and broker from Settings
and hands them to the CLI.  Nothing below this module imports it.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from checkout.domain.model.order import PaymentMethod
from checkout.domain.port.payment_gateway import PaymentGatewayAdapter
from checkout.domain.service.pricing_engine import PricingEngine
from checkout.infrastructure.config import Settings
from checkout.infrastructure.messaging.pika_broker import PikaMessageBroker
from checkout.infrastructure.messaging.relay_worker import OutboxRelayWorker
from checkout.infrastructure.notifications import LoggingNotifier
from checkout.infrastructure.payments.card_processor import InMemoryCardProcessor
from checkout.infrastructure.payments.cash_on_delivery import CashOnDeliveryAdapter
from checkout.infrastructure.persistence.database import make_engine, make_session_factory
from checkout.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def engine() -> Engine:
    return make_engine(settings().database_url)


@lru_cache(maxsize=1)
def session_factory() -> sessionmaker:
    return make_session_factory(engine())


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def pricing_engine() -> PricingEngine:
    return PricingEngine(settings().pricing_policy)


@lru_cache(maxsize=1)
def payment_gateways() -> dict[PaymentMethod, PaymentGatewayAdapter]:
    return {
        PaymentMethod.CARD_PROCESSOR_A: InMemoryCardProcessor("card_processor_a"),
        PaymentMethod.CARD_PROCESSOR_B: InMemoryCardProcessor("card_processor_b"),
        PaymentMethod.CASH_ON_DELIVERY: CashOnDeliveryAdapter(),
    }


def notifier() -> LoggingNotifier:
    return LoggingNotifier()


def relay_worker() -> OutboxRelayWorker:
    config = settings()
    return OutboxRelayWorker(
        uow=unit_of_work(),
        broker=PikaMessageBroker(config.rabbitmq_url, config.events_exchange),
        poll_interval=config.outbox_poll_sec,
        batch_size=config.outbox_batch_size,
    )
