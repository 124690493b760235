import pytest
import stripe
from unittest.mock import MagicMock

from printstream.infra.printify_client import CatalogNotFound, FulfillmentError
from printstream.orders import service as orders_service
from printstream.orders.service import OrderError

USER = {"id": "user-1", "email": "user@example.com", "role": "user"}


@pytest.fixture
def deps(monkeypatch):
    """Remplace catalogue, Stripe, base et Printify par des mocks observables."""
    mocks = {
        "resolve_line": MagicMock(side_effect=lambda pid, vid=None: {
            "product_id": pid, "variant_id": vid or 12, "title": "Canvas", "image_url": "", "price": 12.5,
        }),
        "charge": MagicMock(return_value={"id": "pi_1", "status": "succeeded"}),
        "refund": MagicMock(return_value={"id": "re_1"}),
        "insert_order": MagicMock(return_value={"id": "o1"}),
        "insert_order_items": MagicMock(return_value=None),
        "delete_order": MagicMock(return_value=True),
        "mark_processing": MagicMock(return_value=True),
        "create_order": MagicMock(return_value={"id": "pf-1"}),
    }
    monkeypatch.setattr("printstream.catalog.service.resolve_line", mocks["resolve_line"])
    monkeypatch.setattr("printstream.billing.stripe_client.charge", mocks["charge"])
    monkeypatch.setattr("printstream.billing.stripe_client.refund", mocks["refund"])
    monkeypatch.setattr("printstream.orders.repository.insert_order", mocks["insert_order"])
    monkeypatch.setattr("printstream.orders.repository.insert_order_items", mocks["insert_order_items"])
    monkeypatch.setattr("printstream.orders.repository.delete_order", mocks["delete_order"])
    monkeypatch.setattr("printstream.orders.repository.mark_processing", mocks["mark_processing"])
    monkeypatch.setattr("printstream.infra.printify_client.create_order", mocks["create_order"])
    return mocks


def test_total_uses_catalog_price_not_client_price(deps, valid_address):
    items = [{"productId": "p1", "quantity": 2, "price": 0.01}]
    result = orders_service.create_order(USER, items, valid_address, "pm_card")

    assert deps["charge"].call_args.kwargs["amount"] == 2500
    assert deps["insert_order"].call_args.kwargs["total_amount"] == 25.0
    assert result == {"order_id": "o1", "status": "processing", "total_amount": 25.0}
    deps["mark_processing"].assert_called_once_with("o1", "pf-1")


def test_missing_product_fails_before_payment(deps, valid_address):
    deps["resolve_line"].side_effect = CatalogNotFound("Product not found: ghost", status_code=404)

    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "ghost", "quantity": 1}], valid_address, "pm_card")

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail() == {"message": "Server error", "error": "Product not found: ghost"}
    deps["charge"].assert_not_called()
    deps["insert_order"].assert_not_called()


def test_fulfillment_failure_keeps_order_pending(deps, valid_address):
    deps["create_order"].side_effect = FulfillmentError("Printify unavailable", status_code=503)

    result = orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], valid_address, "pm_card")

    assert result["status"] == "pending"
    deps["mark_processing"].assert_not_called()
    deps["refund"].assert_not_called()


def test_items_write_failure_deletes_order_and_refunds(deps, valid_address):
    deps["insert_order_items"].side_effect = RuntimeError("db down")

    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], valid_address, "pm_card")

    assert exc_info.value.status_code == 500
    deps["delete_order"].assert_called_once_with("o1")
    deps["refund"].assert_called_once_with("pi_1")
    deps["create_order"].assert_not_called()


def test_order_write_failure_refunds_payment(deps, valid_address):
    deps["insert_order"].side_effect = RuntimeError("db down")

    with pytest.raises(OrderError):
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], valid_address, "pm_card")

    deps["refund"].assert_called_once_with("pi_1")
    deps["delete_order"].assert_not_called()


def test_declined_card_is_server_error(deps, valid_address):
    deps["charge"].side_effect = stripe.StripeError("Your card was declined.")

    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], valid_address, "pm_card")

    assert exc_info.value.status_code == 500
    assert "declined" in exc_info.value.error
    deps["insert_order"].assert_not_called()


@pytest.mark.parametrize("items", [None, [], "p1"])
def test_empty_cart_is_rejected(deps, valid_address, items):
    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, items, valid_address, "pm_card")
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "No items provided"


def test_invalid_address_reports_field_errors(deps, valid_address):
    address = dict(valid_address, zip="ABC", city="")
    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], address, "pm_card")
    detail = exc_info.value.detail()
    assert detail["message"] == "Invalid shipping address"
    assert set(detail["errors"]) == {"zip", "city"}
    deps["charge"].assert_not_called()


def test_payment_method_is_required(deps, valid_address):
    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 1}], valid_address, None)
    assert exc_info.value.status_code == 400


def test_minor_units_rounding():
    assert orders_service.to_minor_units(19.99) == 1999
    assert orders_service.to_minor_units(0.005) == 1
    assert orders_service.order_total([{"price": 12.5, "quantity": 2}, {"price": 0.1, "quantity": 3}]) == 25.3


def test_get_order_for_checks_ownership(monkeypatch):
    monkeypatch.setattr("printstream.orders.repository.get_order", lambda oid: {"id": oid, "user_id": "someone-else"})

    with pytest.raises(OrderError) as exc_info:
        orders_service.get_order_for(USER, "o9")
    assert exc_info.value.status_code == 403

    admin = {"id": "admin-1", "role": "admin"}
    assert orders_service.get_order_for(admin, "o9")["id"] == "o9"


def test_get_order_for_omits_failed_printify_lookup(monkeypatch):
    monkeypatch.setattr(
        "printstream.orders.repository.get_order",
        lambda oid: {"id": oid, "user_id": "user-1", "printify_order_id": "pf-1"},
    )
    monkeypatch.setattr(
        "printstream.infra.printify_client.get_order",
        MagicMock(side_effect=FulfillmentError("timeout")),
    )
    order = orders_service.get_order_for(USER, "o1")
    assert "printifyDetails" not in order


def test_resubmit_rejects_already_submitted_order(monkeypatch):
    monkeypatch.setattr(
        "printstream.orders.repository.get_order",
        lambda oid: {"id": oid, "status": "processing", "printify_order_id": "pf-1", "order_items": [{}]},
    )
    with pytest.raises(OrderError) as exc_info:
        orders_service.resubmit_fulfillment("o1")
    assert exc_info.value.status_code == 400


def test_resubmit_sends_stored_lines(deps, monkeypatch, valid_address):
    monkeypatch.setattr(
        "printstream.orders.repository.get_order",
        lambda oid: {
            "id": oid,
            "status": "pending",
            "printify_order_id": None,
            "user_id": "user-1",
            "shipping_address": valid_address,
            "order_items": [{"product_id": "p1", "variant_id": 12, "quantity": 2}],
        },
    )
    result = orders_service.resubmit_fulfillment("o1")

    payload = deps["create_order"].call_args.args[1]
    assert payload["external_id"] == "o1"
    assert payload["line_items"] == [{"product_id": "p1", "variant_id": 12, "quantity": 2}]
    assert payload["shipping_address"]["email"] == "ada@example.com"
    assert result == {"order_id": "o1", "printify_order_id": "pf-1", "status": "processing"}


def test_incomplete_payment_is_cancelled_before_persisting(deps, valid_address, monkeypatch):
    cancel = MagicMock(return_value={"id": "pi_1", "status": "canceled"})
    monkeypatch.setattr("printstream.billing.stripe_client.cancel_payment", cancel)
    deps["charge"].return_value = {"id": "pi_1", "status": "requires_action"}

    with pytest.raises(OrderError) as exc_info:
        orders_service.create_order(USER, [{"productId": "p1", "quantity": 2}], valid_address, "pm_card")

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail() == {"message": "Server error", "error": "Payment not completed: requires_action"}
    cancel.assert_called_once_with("pi_1")
    deps["insert_order"].assert_not_called()
    deps["create_order"].assert_not_called()
