import stripe
from unittest.mock import MagicMock

from printstream.subscriptions.service import SubscriptionError


def test_webhook_rejects_bad_signature(client, monkeypatch):
    async def bad_signature(request):
        raise stripe.SignatureVerificationError("No signatures found matching the expected signature", "t=1,v1=x")

    monkeypatch.setattr("printstream.billing.stripe_client.parse_event", bad_signature)
    handle = MagicMock()
    monkeypatch.setattr("printstream.subscriptions.service.handle_webhook_event", handle)

    r = client.post("/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=x"})

    assert r.status_code == 400
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text.startswith("Webhook Error:")
    handle.assert_not_called()


def test_webhook_accepts_signed_event(client, monkeypatch):
    event = {"type": "customer.subscription.updated", "data": {"object": {"id": "sub_1"}}}

    async def good_signature(request):
        return event

    handle = MagicMock(return_value=True)
    monkeypatch.setattr("printstream.billing.stripe_client.parse_event", good_signature)
    monkeypatch.setattr("printstream.subscriptions.service.handle_webhook_event", handle)

    r = client.post("/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=ok"})

    assert r.status_code == 200
    assert r.json() == {"received": True}
    handle.assert_called_once_with(event)


def test_webhook_is_exempt_from_csrf(client, monkeypatch):
    async def good_signature(request):
        return {"type": "ping", "data": {"object": {}}}

    monkeypatch.setattr("printstream.billing.stripe_client.parse_event", good_signature)
    r = client.post("/api/webhooks/stripe", content=b"{}", headers={"Cookie": "sb-access-token=abc"})
    assert r.status_code == 200


def test_subscribe_duplicate(client, as_user, monkeypatch):
    monkeypatch.setattr(
        "printstream.subscriptions.service.subscribe",
        MagicMock(side_effect=SubscriptionError(400, "Subscription already exists")),
    )
    r = client.post("/api/subscriptions", json={"paymentMethodId": "pm_1", "priceId": "price_1"})
    assert r.status_code == 400
    assert r.json() == {"message": "Subscription already exists"}


def test_subscribe_incomplete_returns_client_secret(client, as_user, monkeypatch):
    monkeypatch.setattr("printstream.subscriptions.service.subscribe", MagicMock(return_value={
        "id": "sub_1",
        "status": "incomplete",
        "current_period_end": None,
        "cancel_at_period_end": False,
        "client_secret": "pi_secret",
    }))
    r = client.post("/api/subscriptions", json={"paymentMethodId": "pm_1", "priceId": "price_1"})
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Subscription created successfully"
    assert body["subscription"]["status"] == "incomplete"
    assert body["subscription"]["clientSecret"] == "pi_secret"
    assert body["subscription"]["cancelAtPeriodEnd"] is False


def test_current_without_subscription(client, as_user, monkeypatch):
    monkeypatch.setattr("printstream.subscriptions.service.current", lambda user: None)
    r = client.get("/api/subscriptions/current")
    assert r.status_code == 200
    assert r.json() == {"subscription": None, "message": "No active subscription found"}


def test_stripe_failure_is_server_error(client, as_user, monkeypatch):
    monkeypatch.setattr(
        "printstream.subscriptions.service.cancel",
        MagicMock(side_effect=stripe.StripeError("No such subscription")),
    )
    r = client.post("/api/subscriptions/cancel")
    assert r.status_code == 500
    assert r.json()["message"] == "Server error"
    assert "No such subscription" in r.json()["error"]


def test_plans_are_public(client, monkeypatch):
    monkeypatch.setattr("printstream.billing.stripe_client.list_active_products", lambda: [])
    r = client.get("/api/subscriptions/plans")
    assert r.status_code == 200
    plan = r.json()["plans"][0]
    assert plan["interval"] == "month"
    assert "priceId" in plan
