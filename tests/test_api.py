from storefront.common.auth import issue_token

from .conftest import ADDRESS, auth_headers


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_cart_requires_token(client, make_user):
    assert client.get("/api/cart").status_code == 401
    bad = client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401
    assert bad.get_json() == {"success": False, "error": "Invalid token"}
    wrong_secret = {"Authorization": f"Bearer {issue_token(make_user(), 'other-secret')}"}
    assert client.get("/api/cart", headers=wrong_secret).status_code == 401


def test_token_for_unknown_user_is_rejected(client):
    resp = client.get("/api/cart", headers=auth_headers("ghost"))
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "User not found"


def test_checkout_flow(client, make_user, make_product, stock_of):
    uid = make_user()
    headers = auth_headers(uid)
    p = make_product(name="P", price="20.00", stock=5)
    q = make_product(name="Q", price="100.00", stock=1)

    assert client.post("/api/cart/add", json={"productId": p, "quantity": 2}, headers=headers).status_code == 200
    assert client.post("/api/cart/add", json={"productId": q}, headers=headers).status_code == 200

    cart = client.get("/api/cart", headers=headers).get_json()["data"]
    assert (cart["subtotal"], cart["itemCount"]) == ("140.00", 3)

    resp = client.post(
        "/api/orders",
        json={"shippingAddress": ADDRESS, "paymentMethod": "card", "notes": "ring twice"},
        headers=headers,
    )
    assert resp.status_code == 201
    order = resp.get_json()["data"]
    assert order["total"] == "154.00"
    assert len(order["items"]) == 2
    assert client.get("/api/cart", headers=headers).get_json()["data"]["items"] == []

    listing = client.get("/api/orders?page=1&limit=5", headers=headers).get_json()["data"]
    assert (listing["total"], listing["page"], listing["limit"], listing["totalPages"]) == (1, 1, 5, 1)
    assert client.get(f"/api/orders/{order['id']}", headers=headers).get_json()["data"]["orderNumber"] == order["orderNumber"]

    cancelled = client.post(f"/api/orders/{order['id']}/cancel", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.get_json()["data"]["status"] == "cancelled"
    assert (stock_of(p), stock_of(q)) == (5, 1)

    again = client.post(f"/api/orders/{order['id']}/cancel", headers=headers)
    assert again.status_code == 400
    assert again.get_json() == {"success": False, "error": "Cannot cancel this order"}


def test_cart_item_update_and_delete(client, make_user, make_product):
    headers = auth_headers(make_user())
    pid = make_product(stock=3)
    client.post("/api/cart/add", json={"productId": pid, "quantity": 1}, headers=headers)
    item_id = client.get("/api/cart", headers=headers).get_json()["data"]["items"][0]["id"]

    assert client.put(f"/api/cart/{item_id}", json={"quantity": 3}, headers=headers).status_code == 200
    assert client.put(f"/api/cart/{item_id}", json={"quantity": 0}, headers=headers).status_code == 400
    over = client.put(f"/api/cart/{item_id}", json={"quantity": 9}, headers=headers)
    assert over.status_code == 400
    assert over.get_json()["error"].startswith("Insufficient stock")
    assert client.put("/api/cart/missing", json={"quantity": 1}, headers=headers).status_code == 404

    assert client.delete(f"/api/cart/{item_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/cart/{item_id}", headers=headers).status_code == 200
    assert client.delete("/api/cart", headers=headers).get_json() == {"success": True, "message": "Cart cleared"}


def test_cart_add_errors(client, make_user, make_product):
    headers = auth_headers(make_user())
    assert client.post("/api/cart/add", json={}, headers=headers).status_code == 400
    assert client.post("/api/cart/add", json={"productId": "nope"}, headers=headers).status_code == 404
    resp = client.post("/api/cart/add", json={"productId": make_product(stock=1), "quantity": 2}, headers=headers)
    assert resp.status_code == 400


def test_order_errors(client, make_user, make_product):
    uid = make_user()
    headers = auth_headers(uid)

    empty = client.post("/api/orders", json={"shippingAddress": ADDRESS, "paymentMethod": "card"}, headers=headers)
    assert (empty.status_code, empty.get_json()["error"]) == (400, "Cart is empty")

    missing = client.post("/api/orders", json={"paymentMethod": "card"}, headers=headers)
    assert missing.status_code == 400

    assert client.get("/api/orders/does-not-exist", headers=headers).status_code == 404


def test_orders_are_private_to_owner(client, make_user, make_product):
    owner, stranger = make_user(), make_user()
    client.post("/api/cart/add", json={"productId": make_product()}, headers=auth_headers(owner))
    order = client.post(
        "/api/orders", json={"shippingAddress": ADDRESS, "paymentMethod": "card"}, headers=auth_headers(owner)
    ).get_json()["data"]

    assert client.get(f"/api/orders/{order['id']}", headers=auth_headers(stranger)).status_code == 404
    assert client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(stranger)).status_code == 404
    assert client.get("/api/orders", headers=auth_headers(stranger)).get_json()["data"]["total"] == 0


def test_status_update_is_admin_only(client, make_user, make_product):
    owner, admin = make_user(), make_user(role="admin")
    client.post("/api/cart/add", json={"productId": make_product()}, headers=auth_headers(owner))
    order = client.post(
        "/api/orders", json={"shippingAddress": ADDRESS, "paymentMethod": "card"}, headers=auth_headers(owner)
    ).get_json()["data"]
    url = f"/api/orders/{order['id']}/status"

    forbidden = client.put(url, json={"status": "processing"}, headers=auth_headers(owner))
    assert (forbidden.status_code, forbidden.get_json()["error"]) == (403, "Admin access required")

    resp = client.put(url, json={"status": "processing", "paymentStatus": "completed"}, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["paymentStatus"] == "completed"
    assert client.put(url, json={"status": "bogus"}, headers=auth_headers(admin)).status_code == 400
    assert client.put("/api/orders/missing/status", json={"status": "shipped"}, headers=auth_headers(admin)).status_code == 404
    assert client.get("/api/orders", headers=auth_headers(admin)).get_json()["data"]["total"] == 1


def test_product_routes(client, make_user):
    admin = auth_headers(make_user(role="admin"))
    shopper = auth_headers(make_user())

    assert client.post("/api/products", json={"name": "Mug", "price": "5"}, headers=shopper).status_code == 403
    created = client.post("/api/products", json={"name": "Mug", "price": "5", "stock": 2}, headers=admin)
    assert created.status_code == 201
    product = created.get_json()["data"]

    assert client.get(f"/api/products/{product['slug']}").get_json()["data"]["price"] == "5.00"
    assert client.get("/api/products?search=mug").get_json()["data"]["total"] == 1

    updated = client.put(f"/api/products/{product['id']}", json={"stock": 7, "ignored": 1}, headers=admin)
    assert updated.get_json()["data"]["stock"] == 7

    assert client.delete(f"/api/products/{product['id']}", headers=admin).status_code == 200
    assert client.get(f"/api/products/{product['slug']}").status_code == 404


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_unexpected_errors_are_hidden(client, app, make_user, monkeypatch, capsys):
    def explode(**kwargs):
        raise RuntimeError("db on fire")

    monkeypatch.setattr(app.extensions["storefront_components"]["cart_service"], "get_cart", explode)

    resp = client.get("/api/cart", headers=auth_headers(make_user()))

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Internal server error"}
    logged = capsys.readouterr().out
    assert "request.failed" in logged
    assert "db on fire" in logged
