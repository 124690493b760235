"""
Endpoints abonnements + webhook Stripe.
- /api/subscriptions/*: actions utilisateur (require_user), offres publiques (/plans)
- /api/webhooks/stripe: corps brut signé; 400 texte si la signature est invalide
"""
import logging
from typing import Any, Dict

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from printstream.billing import stripe_client
from printstream.subscriptions import service as subscriptions_service
from printstream.subscriptions.models import (
    CurrentSubscriptionResponse,
    PlansResponse,
    SetupIntentResponse,
    SubscribeRequest,
    SubscriptionEnvelope,
)
from printstream.subscriptions.service import SubscriptionError
from printstream.utils.errors import server_error
from printstream.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions API"])
webhook_router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


def _run(action: str, fn, *args):
    """Exécute une action du service et traduit ses erreurs en HTTPException."""
    try:
        return fn(*args)
    except SubscriptionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except stripe.StripeError as e:
        logger.exception("subscriptions.views.%s failed", action)
        raise server_error(e)


# module printstream.subscriptions.views
@router.post("", status_code=201, response_model=SubscriptionEnvelope)
def create_subscription(body: SubscribeRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Souscrit l'utilisateur à l'offre priceId avec le moyen de paiement paymentMethodId.
    - status 'incomplete': clientSecret fourni pour l'authentification complémentaire.
    - 400 si un abonnement non terminal existe déjà.
    """
    summary = _run("create_subscription", subscriptions_service.subscribe, user, body.paymentMethodId, body.priceId)
    return {"message": "Subscription created successfully", "subscription": summary}


@router.post("/cancel", response_model=SubscriptionEnvelope)
def cancel_subscription(user: Dict[str, Any] = Depends(require_user)):
    summary = _run("cancel_subscription", subscriptions_service.cancel, user)
    return {"message": "Subscription will be canceled at the end of the billing period", "subscription": summary}


@router.post("/resume", response_model=SubscriptionEnvelope)
def resume_subscription(user: Dict[str, Any] = Depends(require_user)):
    summary = _run("resume_subscription", subscriptions_service.resume, user)
    return {"message": "Subscription resumed successfully", "subscription": summary}


@router.get("/current", response_model=CurrentSubscriptionResponse, response_model_exclude_none=True)
def current_subscription(user: Dict[str, Any] = Depends(require_user)):
    data = _run("current_subscription", subscriptions_service.current, user)
    if data is None:
        return JSONResponse({"subscription": None, "message": "No active subscription found"})
    return {"subscription": data}


@router.post("/setup-intent", response_model=SetupIntentResponse)
def create_setup_intent(user: Dict[str, Any] = Depends(require_user)):
    client_secret = _run("create_setup_intent", subscriptions_service.setup_intent, user)
    return {"client_secret": client_secret}


@router.get("/plans", response_model=PlansResponse)
def list_plans():
    return {"plans": _run("list_plans", subscriptions_service.list_plans)}


@webhook_router.post("/stripe", include_in_schema=False)
async def stripe_webhook(request: Request):
    """
    Webhook Stripe (abonnements).
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Événements traités: customer.subscription.created/updated/deleted, invoice.payment_succeeded
    - Réponses: {"received": true}, ou 400 texte "Webhook Error: <raison>"
    """
    try:
        event = await stripe_client.parse_event(request)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("subscriptions.webhook rejected: %s", e)
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)

    try:
        applied = subscriptions_service.handle_webhook_event(event)
    except Exception as e:
        logger.exception("subscriptions.webhook processing failed type=%s", event.get("type"))
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)
    logger.info("subscriptions.webhook type=%s applied=%s", event.get("type"), applied)
    return {"received": True}
