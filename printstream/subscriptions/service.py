"""
Subscription Synchronizer: cycle de vie de l'abonnement Stripe et recopie locale.

États: none -> incomplete -> {active, trialing} -> {past_due, canceled, incomplete_expired};
cancel_at_period_end est un drapeau orthogonal.

- subscribe/cancel/resume: actions directes de l'utilisateur.
- handle_webhook_event: réconciliation asynchrone; relit toujours l'abonnement chez Stripe
  puis écrase l'état local (rejouer un événement donne le même état final).
"""
import json
import logging
from typing import Any, Dict, List, Optional

from printstream.billing import stripe_client
from printstream.config import (
    FALLBACK_PLAN_PRICE_ID,
    FALLBACK_PLAN_PRODUCT_ID,
    STRIPE_CURRENCY,
    SUBSCRIPTION_MONTHLY_PRICE,
)
from printstream.profiles import repository as profiles_repository
from printstream.subscriptions import repository

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = (
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
)
INVOICE_PAID_EVENT = "invoice.payment_succeeded"
DEFAULT_FEATURE = "Access to exclusive content"


class SubscriptionError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _summary(sub: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": sub.get("id"),
        "status": sub.get("status"),
        "current_period_end": stripe_client.period_end_iso(sub),
        "cancel_at_period_end": bool(sub.get("cancel_at_period_end")),
    }


# --- Client de facturation ---

def ensure_customer(user: Dict[str, Any]) -> str:
    """Retourne la référence client Stripe du profil, en la créant (et la persistant) si absente."""
    customer_id = user.get("stripe_customer_id")
    if customer_id:
        return customer_id
    name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    customer = stripe_client.create_customer(email=user.get("email") or "", name=name, user_id=str(user["id"]))
    customer_id = customer["id"]
    profiles_repository.set_billing_customer(user["id"], customer_id)
    user["stripe_customer_id"] = customer_id
    return customer_id


# module printstream.subscriptions.service
def subscribe(user: Dict[str, Any], payment_method_id: Optional[str], price_id: Optional[str]) -> Dict[str, Any]:
    """
    Crée l'abonnement récurrent.
    - Refus (400) si un abonnement non terminal existe déjà pour l'utilisateur.
    - Retourne le statut pour distinguer 'incomplete' (authentification client requise,
      clientSecret fourni) de 'active'/'trialing'.
    """
    if not payment_method_id or not price_id:
        raise SubscriptionError(400, "paymentMethodId and priceId are required")
    if repository.find_non_terminal(user["id"]):
        raise SubscriptionError(400, "Subscription already exists")

    customer_id = ensure_customer(user)
    stripe_client.attach_payment_method(payment_method_id, customer_id)
    sub = stripe_client.create_subscription(customer_id, price_id)

    summary = _summary(sub)
    repository.insert_subscription(
        user_id=user["id"],
        stripe_subscription_id=sub["id"],
        stripe_price_id=price_id,
        status=summary["status"],
        current_period_end=summary["current_period_end"],
        cancel_at_period_end=summary["cancel_at_period_end"],
    )
    profiles_repository.mirror_subscription(user["id"], summary["status"], summary["current_period_end"])

    if summary["status"] == "incomplete":
        intent = ((sub.get("latest_invoice") or {}).get("payment_intent")) or {}
        if isinstance(intent, dict) and intent.get("client_secret"):
            summary["client_secret"] = intent["client_secret"]
    logger.info("subscriptions.subscribe user_id=%s subscription=%s status=%s", user["id"], sub["id"], summary["status"])
    return summary


def _current_row(user_id: str) -> Dict[str, Any]:
    row = repository.get_latest_for_user(user_id)
    if not row:
        raise SubscriptionError(404, "No subscription found")
    return row


def cancel(user: Dict[str, Any]) -> Dict[str, Any]:
    """Annulation en fin de période; le profil passe à 'canceled' immédiatement."""
    row = _current_row(user["id"])
    sub = stripe_client.set_cancel_at_period_end(row["stripe_subscription_id"], True)
    repository.update_by_stripe_id(row["stripe_subscription_id"], {
        "status": sub.get("status"),
        "cancel_at_period_end": True,
    })
    profiles_repository.set_subscription_status(user["id"], "canceled")
    return dict(_summary(sub), id=str(row["id"]))


def resume(user: Dict[str, Any]) -> Dict[str, Any]:
    """Lève le drapeau cancel_at_period_end; le statut n'est pas modifié."""
    row = _current_row(user["id"])
    sub = stripe_client.set_cancel_at_period_end(row["stripe_subscription_id"], False)
    repository.update_by_stripe_id(row["stripe_subscription_id"], {"cancel_at_period_end": False})
    return dict(_summary(sub), id=str(row["id"]))


def current(user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    row = repository.get_latest_for_user(user["id"])
    if not row:
        return None
    sub = stripe_client.retrieve_subscription(row["stripe_subscription_id"])
    items = ((sub.get("items") or {}).get("data")) or []
    price = (items[0].get("price") if items else None) or {}
    plan: Optional[Dict[str, Any]] = None
    if price:
        product = price.get("product")
        if isinstance(product, str):
            product = stripe_client.retrieve_product(product)
        product = product or {}
        plan = {
            "id": product.get("id"),
            "name": product.get("name"),
            "amount": (price.get("unit_amount") or 0) / 100,
            "currency": price.get("currency"),
            "interval": (price.get("recurring") or {}).get("interval"),
        }
    data = _summary(sub)
    data.update({"id": str(row.get("id")), "stripe_id": row["stripe_subscription_id"], "plan": plan})
    return data


def setup_intent(user: Dict[str, Any]) -> str:
    customer_id = ensure_customer(user)
    intent = stripe_client.create_setup_intent(customer_id)
    return intent.get("client_secret")


# --- Offres ---

def _features(metadata: Dict[str, Any]) -> List[str]:
    raw = (metadata or {}).get("features")
    features: List[str] = []
    if raw:
        try:
            parsed = json.loads(raw)
            features = [str(f) for f in parsed] if isinstance(parsed, list) else [str(parsed)]
        except ValueError:
            features = [f.strip() for f in str(raw).split(",") if f.strip()]
    return features or [DEFAULT_FEATURE]


def fallback_plan() -> Dict[str, Any]:
    return {
        "id": FALLBACK_PLAN_PRODUCT_ID,
        "name": "Exclusive Content Subscription",
        "description": DEFAULT_FEATURE,
        "price_id": FALLBACK_PLAN_PRICE_ID,
        "price": SUBSCRIPTION_MONTHLY_PRICE,
        "currency": STRIPE_CURRENCY,
        "interval": "month",
        "features": [DEFAULT_FEATURE, "Monthly updates"],
    }


def list_plans() -> List[Dict[str, Any]]:
    plans = []
    for product in stripe_client.list_active_products():
        price = product.get("default_price")
        if not isinstance(price, dict):
            continue
        plans.append({
            "id": product.get("id"),
            "name": product.get("name"),
            "description": product.get("description") or "",
            "price_id": price.get("id"),
            "price": (price.get("unit_amount") or 0) / 100,
            "currency": price.get("currency"),
            "interval": (price.get("recurring") or {}).get("interval") or "month",
            "features": _features(product.get("metadata") or {}),
        })
    return plans or [fallback_plan()]


# --- Webhooks ---

def sync_from_stripe(subscription_id: str) -> bool:
    """
    Relit l'abonnement chez Stripe et écrase la ligne locale + le profil.
    Retourne False (sans effet) si aucune ligne locale ne correspond.
    """
    row = repository.get_by_stripe_id(subscription_id)
    if not row:
        logger.info("subscriptions.sync skipped unknown subscription=%s", subscription_id)
        return False
    sub = stripe_client.retrieve_subscription(subscription_id)
    summary = _summary(sub)
    repository.update_by_stripe_id(subscription_id, {
        "status": summary["status"],
        "current_period_end": summary["current_period_end"],
        "cancel_at_period_end": summary["cancel_at_period_end"],
    })
    profiles_repository.mirror_subscription(row["user_id"], summary["status"], summary["current_period_end"])
    return True


def handle_webhook_event(event: Dict[str, Any]) -> bool:
    event_type = event.get("type")
    obj = ((event.get("data") or {}).get("object")) or {}
    if event_type in SUBSCRIPTION_EVENTS:
        subscription_id = obj.get("id")
    elif event_type == INVOICE_PAID_EVENT:
        subscription_id = obj.get("subscription") or (
            ((obj.get("parent") or {}).get("subscription_details") or {}).get("subscription")
        )
    else:
        return False
    if not subscription_id:
        return False
    return sync_from_stripe(subscription_id)
