import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_secret")
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from hotel_orders.application.order_service import OrderService
from hotel_orders.application.payment_reconciler import PaymentReconciler
from hotel_orders.domain import models  # noqa: F401
from hotel_orders.infrastructure.database import Base, make_engine, make_session_factory
from hotel_orders.infrastructure.delivery_ledger import DeliveryLedger
from hotel_orders.infrastructure.repositories.customer_repository import PostgresCustomerRepository
from hotel_orders.infrastructure.repositories.order_repository import PostgresOrderRepository

from fakes import SECRET_KEY, FakeGateway, InMemoryStore, RecordingNotifier


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def order_repo(session_factory):
    return PostgresOrderRepository(session_factory)


@pytest.fixture
def customer_repo(session_factory):
    return PostgresCustomerRepository(session_factory)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def ledger():
    return DeliveryLedger()


@pytest.fixture
def service(order_repo, customer_repo, gateway):
    return OrderService(order_repo=order_repo, customer_repo=customer_repo, gateway=gateway)


@pytest.fixture
def reconciler(order_repo, gateway, ledger, notifier):
    return PaymentReconciler(
        order_repo=order_repo,
        gateway=gateway,
        secret_key=SECRET_KEY,
        ledger=ledger,
        notifier=notifier,
    )


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def client(service, reconciler):
    from hotel_orders.main import create_app

    with TestClient(create_app(order_service=service, reconciler=reconciler)) as test_client:
        yield test_client
