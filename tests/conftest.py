from decimal import Decimal
from uuid import uuid4

import pytest

from storefront.app import create_app
from storefront.common.auth import issue_token
from storefront.common.db import Database
from storefront.common.models import Order, OrderItem, Product, User
from storefront.common.services import CartService, CatalogService, OrderService
from storefront.config import StoreConfig


TEST_SECRET = "test-secret"

ADDRESS = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "street": "12 Analytical Way",
    "city": "London",
    "state": "LDN",
    "postalCode": "N1 9GU",
    "country": "UK",
}


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'store.db'}").connect()
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def cart_service(database):
    return CartService(database.session)


@pytest.fixture
def order_service(database):
    return OrderService(database.session)


@pytest.fixture
def catalog_service(database):
    return CatalogService(database.session)


@pytest.fixture
def make_user(database):
    def _make(role="user"):
        uid = str(uuid4())
        with database.session() as s:
            s.add(User(id=uid, email=f"{uid}@example.com", name="Shopper", role=role))
        return uid

    return _make


@pytest.fixture
def make_product(database):
    def _make(name="Widget", price="10.00", stock=5, active=True, thumbnail=None):
        pid = str(uuid4())
        with database.session() as s:
            s.add(
                Product(
                    id=pid,
                    name=name,
                    slug=f"{name.lower().replace(' ', '-')}-{pid[:8]}",
                    price=Decimal(price),
                    stock=stock,
                    active=active,
                    thumbnail=thumbnail,
                )
            )
        return pid

    return _make


@pytest.fixture
def stock_of(database):
    def _stock(pid):
        with database.session() as s:
            return s.get(Product, pid).stock

    return _stock


@pytest.fixture
def count_rows(database):
    def _count(model):
        with database.session() as s:
            return s.query(model).count()

    return _count


@pytest.fixture
def order_rows(count_rows):
    def _rows():
        return count_rows(Order), count_rows(OrderItem)

    return _rows


@pytest.fixture
def app(database):
    config = StoreConfig(
        database_url=database.url,
        secret_key=TEST_SECRET,
        log_level="WARNING",
        tax_rate=Decimal("0.10"),
        free_shipping_threshold=Decimal("100"),
        flat_shipping_fee=Decimal("10"),
    )
    flask_app = create_app(config, database)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(user_id):
    return {"Authorization": f"Bearer {issue_token(user_id, TEST_SECRET)}"}
