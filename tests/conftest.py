import pytest
from fastapi.testclient import TestClient

from checkout.config import Settings
from checkout.database import init_db
from checkout.main import create_app
from checkout.models import Order
from checkout.orders import OrderStore
from tests.helpers import WEBHOOK_SECRET


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
def session_factory(database_url):
    factory = init_db(database_url)
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def store(session_factory):
    return OrderStore(session_factory)


@pytest.fixture
def count_orders(session_factory):
    def count(**filters):
        with session_factory() as db:
            return db.query(Order).filter_by(**filters).count()
    return count


@pytest.fixture
def settings(database_url):
    return Settings(
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        database_url=database_url,
    )


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings, store=store)) as c:
        yield c
