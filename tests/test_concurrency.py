"""Concurrent checkouts racing for the same limited stock.

Every thread validates its cart before any of them writes, so only the
conditional stock decrement decides who wins. Runs against the per-test
SQLite file by default; set STOREFRONT_TEST_DATABASE_URL to repeat it on a
server database.
"""

import os
import threading
from decimal import Decimal
from uuid import uuid4

import pytest

from storefront.common.db import Database
from storefront.common.errors import InsufficientStock
from storefront.common.models import Order, Product, User
from storefront.common.services import CartService, OrderService

from .conftest import ADDRESS


DATABASE_URL = os.environ.get("STOREFRONT_TEST_DATABASE_URL")


@pytest.fixture
def race_database(request):
    if not DATABASE_URL:
        return request.getfixturevalue("database")
    db = Database(DATABASE_URL).connect()
    db.create_all()
    request.addfinalizer(db.close)
    return db


@pytest.mark.parametrize("shoppers,stock", [(8, 3), (5, 5), (6, 1)])
def test_concurrent_checkouts_never_oversell(race_database, shoppers, stock):
    db = race_database
    carts = CartService(db.session)
    orders = OrderService(db.session)
    pid = str(uuid4())
    with db.session() as s:
        s.add(Product(id=pid, name="Limited", slug=f"limited-{pid}", price=Decimal("10.00"), stock=stock, active=True))

    users = []
    for _ in range(shoppers):
        uid = str(uuid4())
        with db.session() as s:
            s.add(User(id=uid, email=f"{uid}@example.com", name="Racer", role="user"))
        carts.add_item(user_id=uid, product_id=pid, quantity=1)
        users.append(uid)

    barrier = threading.Barrier(len(users))
    outcomes = []
    lock = threading.Lock()

    def checkout(uid):
        barrier.wait()
        try:
            orders.place_order(user_id=uid, shipping_address=dict(ADDRESS), payment_method="card")
            result = "ok"
        except InsufficientStock:
            result = "sold-out"
        except Exception as exc:  # surfaced through the outcome assertions
            result = repr(exc)
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=checkout, args=(uid,)) for uid in users]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = min(shoppers, stock)
    assert sorted(outcomes) == ["ok"] * winners + ["sold-out"] * (shoppers - winners)
    with db.session() as s:
        assert s.get(Product, pid).stock == stock - winners
        assert s.query(Order).filter(Order.user_id.in_(users)).count() == winners
    for uid in users:
        # losers keep their cart, winners have it cleared
        assert carts.get_cart(user_id=uid)["itemCount"] in (0, 1)
    assert sum(carts.get_cart(user_id=uid)["itemCount"] for uid in users) == shoppers - winners
