from unittest.mock import MagicMock

from printstream.orders.service import OrderError


def test_create_order_requires_authentication(client, monkeypatch):
    create = MagicMock()
    monkeypatch.setattr("printstream.orders.service.create_order", create)

    r = client.post("/api/orders", json={"items": [{"productId": "p1", "quantity": 1}]})

    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}
    create.assert_not_called()


def test_create_order_with_empty_cart(client, as_user, valid_address):
    r = client.post("/api/orders", json={"items": [], "shippingAddress": valid_address, "paymentMethodId": "pm_1"})
    assert r.status_code == 400
    assert r.json() == {"message": "No items provided"}


def test_create_order_success(client, as_user, valid_address, monkeypatch):
    create = MagicMock(return_value={"order_id": 42, "status": "processing", "total_amount": 25.0})
    monkeypatch.setattr("printstream.orders.service.create_order", create)

    items = [{"productId": "p1", "quantity": 2, "price": 0.01}]
    r = client.post("/api/orders", json={"items": items, "shippingAddress": valid_address, "paymentMethodId": "pm_1"})

    assert r.status_code == 201
    assert r.json() == {"message": "Order created successfully", "orderId": "42"}
    user, sent_items, address, pm = create.call_args.args
    assert user["id"] == as_user["id"]
    assert sent_items == items
    assert pm == "pm_1"


def test_create_order_product_not_found(client, as_user, valid_address, monkeypatch):
    monkeypatch.setattr(
        "printstream.orders.service.create_order",
        MagicMock(side_effect=OrderError(500, "Server error", error="Product not found: ghost")),
    )
    r = client.post("/api/orders", json={"items": [{"productId": "ghost", "quantity": 1}], "shippingAddress": valid_address, "paymentMethodId": "pm_1"})
    assert r.status_code == 500
    assert r.json() == {"message": "Server error", "error": "Product not found: ghost"}


def test_order_detail_forbidden_for_other_users(client, as_user, monkeypatch):
    monkeypatch.setattr("printstream.orders.repository.get_order", lambda oid: {"id": oid, "user_id": "someone-else"})
    r = client.get("/api/orders/o9")
    assert r.status_code == 403
    assert r.json() == {"message": "Unauthorized"}


def test_order_detail_not_found(client, as_user, monkeypatch):
    monkeypatch.setattr("printstream.orders.repository.get_order", lambda oid: None)
    r = client.get("/api/orders/o404")
    assert r.status_code == 404
    assert r.json() == {"message": "Order not found"}


def test_user_orders_paginated(client, as_user, monkeypatch):
    list_orders = MagicMock(return_value=([{"id": "o1", "user_id": "user-1"}], 11))
    monkeypatch.setattr("printstream.orders.repository.list_user_orders", list_orders)

    r = client.get("/api/orders/user?page=2&limit=5")

    assert r.status_code == 200
    assert r.json() == {"orders": [{"id": "o1", "user_id": "user-1"}], "totalPages": 3, "currentPage": 2, "totalOrders": 11}
    list_orders.assert_called_once_with("user-1", page=2, limit=5)
