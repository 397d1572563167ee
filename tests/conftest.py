import os
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pins ENVIRONMENT so logging and settings pick the test profile.
    """
    os.environ["ENVIRONMENT"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def settings(tmp_path_factory, request):
    from shared.config import Settings

    db_path = tmp_path_factory.mktemp("db") / "nepify_test.db"
    return Settings(
        environment=request.config.option.env,
        database_url=f"sqlite:///{db_path}",
        auth_secret_key="test-secret",
        payment_gateway="fake",
        frontend_url="http://frontend.test",
    )


@pytest.fixture(scope="session")
def database(settings):
    import catalogue.product.product  # noqa: F401
    import catalogue.shop.shop  # noqa: F401
    import identity.user.user  # noqa: F401
    import ordering.address.address  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401
    from shared.database import Database

    db = Database(settings.database_url)
    db.create_all()

    yield db

    db.drop_all()
    db.dispose()


@pytest.fixture(autouse=True)
def run_around_tests(request):
    """Fixture to automatically cleanup the database after every test"""
    yield

    if "database" in request.fixturenames:
        request.getfixturevalue("database").reset()


@pytest.fixture()
def gateway(settings):
    from payments.gateway.fake_adapter import FakeGateway

    return FakeGateway(frontend_url=settings.frontend_url)


@pytest.fixture()
def app(settings, database, gateway):
    from app import create_app

    return create_app(settings=settings, database=database, gateway=gateway)


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_user(database):
    from identity.user.registration import SyncUser, sync_user
    from identity.user.user import UserRole

    counter = {"n": 0}

    def _make_user(role=UserRole.CUSTOMER, external_id=None, email=None):
        counter["n"] += 1
        n = counter["n"]
        command = SyncUser(
            external_id=external_id or f"ext_user_{n}",
            email=email or f"user{n}@example.com",
            first_name="Test",
            last_name=f"User{n}",
            role=role,
        )
        with database.transaction() as session:
            return sync_user(session, command)

    return _make_user


@pytest.fixture()
def make_shop(database):
    from catalogue.shop.shop import Shop, ShopRepository

    def _make_shop(owner, name="Test Shop"):
        with database.transaction() as session:
            return ShopRepository(session).add(Shop(owner_id=owner.id, name=name))

    return _make_shop


@pytest.fixture()
def make_product(database):
    from catalogue.product.product import Product, ProductRepository

    def _make_product(shop, name="Widget", price="100.00", stock=10, is_active=True):
        with database.transaction() as session:
            return ProductRepository(session).add(
                Product(
                    shop_id=shop.id,
                    name=name,
                    price=Decimal(price),
                    stock_quantity=stock,
                    is_active=is_active,
                )
            )

    return _make_product


@pytest.fixture()
def make_token(settings):
    from jose import jwt

    def _make_token(subject, expires_in=timedelta(hours=1), secret=None):
        claims = {"sub": subject, "exp": datetime.now(UTC) + expires_in}
        return jwt.encode(claims, secret or settings.auth_secret_key, algorithm=settings.auth_algorithm)

    return _make_token


@pytest.fixture()
def auth_headers(make_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {make_token(user.external_id)}"}

    return _auth_headers


@pytest.fixture()
def vendor_with_shop(make_user, make_shop):
    """A vendor user and the shop they own."""
    from identity.user.user import UserRole

    vendor = make_user(role=UserRole.VENDOR)
    shop = make_shop(vendor)
    return vendor, shop


@pytest.fixture()
def stock_of(database):
    """Read a product's stock straight from the database."""
    from catalogue.product.stock import current_stock

    def _stock_of(product):
        with database.transaction() as session:
            return current_stock(session, product.id)

    return _stock_of
