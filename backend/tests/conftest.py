"""
Shared fixtures for the NetCommerce gateway tests.

Each test gets its own SQLite file with the production schema, and a
gateway configuration with a known merchant number and secret.
"""
import sqlite3
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from netcommerce.api.deps import get_gateway_config
from netcommerce.db.init_db import (
    create_engine_for,
    create_session_factory,
    create_tables,
    get_db,
    seed_demo_data,
)
from netcommerce.main import app
from netcommerce.mocks.hosted_processor import build_callback
from netcommerce.models.gateway import GatewayConfig
from netcommerce.models.orders import BillingAddress, Order
from netcommerce.services.order_service import SqlOrderStore


MERCHANT_NUMBER = "M1"
SHA_KEY = "s3cr3t"


@pytest.fixture
def gateway():
    return GatewayConfig(
        merchant_number=MERCHANT_NUMBER,
        sha_key=SHA_KEY,
        request_url="https://pay.example/ipay",
        base_url="https://shop",
    )


@pytest.fixture
def billing():
    return BillingAddress(
        first_name="Rami",
        last_name="Haddad",
        email="rami@example.com",
        phone="+961 3 123 456",
        city="Beirut",
        country="LB",
    )


@pytest.fixture
def order(billing):
    return Order(
        id=42,
        total=Decimal("19.99"),
        currency="USD",
        customer_id=7,
        cart_session_id="sess_demo",
        billing=billing,
    )


@pytest.fixture
def make_callback():
    """Factory for callbacks signed the way NetCommerce signs them."""

    def _make(
        order_reference="42_1700000000000000000",
        result_value="1",
        result_message="Approved",
        authorization_number="A1B2C3",
        amount="19.99",
        currency_code="840",
        sha_key=SHA_KEY,
    ):
        request = {
            "txtMerchNum": MERCHANT_NUMBER,
            "txtIndex": order_reference,
            "txtAmount": amount,
            "txtCurrency": currency_code,
        }
        return build_callback(
            request,
            sha_key,
            result_value=result_value,
            result_message=result_message,
            authorization_number=authorization_number,
        )

    return _make


@pytest.fixture
def database_path(tmp_path):
    path = tmp_path / "netcommerce_test.db"
    conn = sqlite3.connect(path)
    try:
        create_tables(conn)
    finally:
        conn.close()
    return path


@pytest_asyncio.fixture
async def session_factory(database_path):
    engine = create_engine_for(str(database_path), poolclass=NullPool)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def store(session_factory):
    async with session_factory() as session:
        yield SqlOrderStore(session)


@pytest_asyncio.fixture
async def pending_order(store, billing):
    """Order 42 persisted as pending, with one item in its cart."""
    order = await store.create_order(
        42,
        Decimal("19.99"),
        currency="USD",
        billing=billing,
        customer_id=7,
        cart_session_id="sess_demo",
    )
    await store.add_cart_item("sess_demo", "SKU001")
    await store.commit()
    return order


@pytest.fixture
def seeded_database(database_path):
    """Demo order 42 (USD), plus order 43 in LBP and order 44 in EUR."""
    conn = sqlite3.connect(database_path)
    try:
        seed_demo_data(conn)
        conn.execute(
            "INSERT INTO orders (id, status, total, currency, billing_email) "
            "VALUES (43, 'pending', '150000', 'LBP', 'lbp@example.com')"
        )
        conn.execute(
            "INSERT INTO orders (id, status, total, currency) "
            "VALUES (44, 'pending', '25.00', 'EUR')"
        )
        conn.execute(
            "INSERT INTO orders (id, status, total, currency, payment_reference) "
            "VALUES (45, 'paid', '10.00', 'USD', 'F00BA2')"
        )
        conn.commit()
    finally:
        conn.close()
    return database_path


@pytest.fixture
def client(seeded_database, gateway):
    """
    TestClient against the real app, bound to the test database.

    The lifespan is not entered, so the default database is never touched.
    """
    engine = create_engine_for(str(seeded_database), poolclass=NullPool)
    factory = create_session_factory(engine)

    async def _override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_gateway_config] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()
