"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Toutes les fonctions renvoient des dicts (objets Stripe convertis via as_dict).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import stripe
from fastapi import Request

from printstream.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, STRIPE_CURRENCY


# module printstream.billing.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échoueront côté SDK (ex: No API key provided).
    """
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    return stripe


def as_dict(obj: Any) -> Dict[str, Any]:
    """Convertit un StripeObject (ou dict) en dict Python récursif."""
    if obj is None:
        return {}
    if isinstance(obj, dict) and not hasattr(obj, "to_dict_recursive") and not hasattr(obj, "to_dict"):
        return obj
    if hasattr(obj, "to_dict_recursive"):
        return obj.to_dict_recursive()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def period_end(subscription: Dict[str, Any]) -> Optional[int]:
    """
    Timestamp de fin de période courante.
    Les versions récentes de l'API Stripe le portent sur les items d'abonnement.
    """
    value = subscription.get("current_period_end")
    if value:
        return int(value)
    items = ((subscription.get("items") or {}).get("data")) or []
    if items and items[0].get("current_period_end"):
        return int(items[0]["current_period_end"])
    return None


def period_end_iso(subscription: Dict[str, Any]) -> Optional[str]:
    ts = period_end(subscription)
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


# --- Clients ---

def create_customer(*, email: str, name: str, user_id: str) -> Dict[str, Any]:
    require_stripe()
    customer = stripe.Customer.create(email=email, name=name, metadata={"userId": user_id})
    return as_dict(customer)


def attach_payment_method(payment_method_id: str, customer_id: str) -> Dict[str, Any]:
    """Attache le moyen de paiement et le définit par défaut pour les factures."""
    require_stripe()
    pm = stripe.PaymentMethod.attach(payment_method_id, customer=customer_id)
    stripe.Customer.modify(customer_id, invoice_settings={"default_payment_method": payment_method_id})
    return as_dict(pm)


# --- Abonnements ---

def create_subscription(customer_id: str, price_id: str) -> Dict[str, Any]:
    require_stripe()
    sub = stripe.Subscription.create(
        customer=customer_id,
        items=[{"price": price_id}],
        expand=["latest_invoice.payment_intent"],
    )
    return as_dict(sub)


def retrieve_subscription(subscription_id: str) -> Dict[str, Any]:
    require_stripe()
    return as_dict(stripe.Subscription.retrieve(subscription_id))


def set_cancel_at_period_end(subscription_id: str, flag: bool) -> Dict[str, Any]:
    require_stripe()
    return as_dict(stripe.Subscription.modify(subscription_id, cancel_at_period_end=flag))


def retrieve_product(product_id: str) -> Dict[str, Any]:
    require_stripe()
    return as_dict(stripe.Product.retrieve(product_id))


def list_active_products() -> List[Dict[str, Any]]:
    require_stripe()
    products = stripe.Product.list(active=True, expand=["data.default_price"])
    return list(as_dict(products).get("data") or [])


def create_setup_intent(customer_id: str) -> Dict[str, Any]:
    require_stripe()
    intent = stripe.SetupIntent.create(customer=customer_id, payment_method_types=["card"])
    return as_dict(intent)


# --- Paiements ponctuels (commandes) ---

def charge(
    *,
    amount: int,
    payment_method_id: str,
    customer_id: Optional[str] = None,
    description: str = "Canvas print order",
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Crée et confirme un PaymentIntent (montant en unités mineures).
    Lève stripe.StripeError en cas de refus ou d'erreur.
    """
    require_stripe()
    params: Dict[str, Any] = {
        "amount": int(amount),
        "currency": STRIPE_CURRENCY,
        "payment_method": payment_method_id,
        "confirm": True,
        "description": description,
        "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
    }
    if customer_id:
        params["customer"] = customer_id
    if metadata:
        params["metadata"] = metadata
    return as_dict(stripe.PaymentIntent.create(**params))


def refund(payment_intent_id: str) -> Dict[str, Any]:
    require_stripe()
    return as_dict(stripe.Refund.create(payment_intent=payment_intent_id))


def cancel_payment(payment_intent_id: str) -> Dict[str, Any]:
    require_stripe()
    return as_dict(stripe.PaymentIntent.cancel(payment_intent_id))


# --- Webhooks ---

async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Lève ValueError (payload) ou stripe.SignatureVerificationError (signature).
    """
    require_stripe()
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    event = stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET or "")
    return as_dict(event)
