"""
Order Writer: panier -> prix serveur -> paiement -> persistance -> fulfillment.

Étapes (create_order):
  1) validation des lignes, de l'adresse et du moyen de paiement (400)
  2) résolution de chaque ligne via le catalogue; un produit introuvable fait échouer
     toute la requête avant paiement (500 "Product not found: <id>")
  3) total = Σ prix serveur × quantité (les prix client sont ignorés)
  4) PaymentIntent confirmé pour round(total × 100) unités mineures
  5) commande 'pending' + lignes; en cas d'échec d'écriture: suppression de la commande
     et remboursement du paiement
  6) commande Printify; succès => 'processing' + printify_order_id, échec => reste 'pending'
     (visible dans la vue de remédiation admin)
"""
import logging
import math
from typing import Any, Dict, List, Optional

import stripe

from printstream.billing import stripe_client
from printstream.catalog import service as catalog_service
from printstream.config import PRINTIFY_SHOP_ID, PRINTIFY_SHIPPING_METHOD
from printstream.infra import printify_client
from printstream.infra.printify_client import CatalogNotFound, FulfillmentError
from printstream.orders import repository
from printstream.profiles import repository as profiles_repository
from printstream.utils.validators import validate_address

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class OrderError(Exception):
    def __init__(self, status_code: int, message: str, error: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error
        self.errors = errors

    def detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"message": self.message}
        if self.error:
            detail["error"] = self.error
        if self.errors:
            detail["errors"] = self.errors
        return detail


def _server_error(message: str) -> OrderError:
    return OrderError(500, "Server error", error=message)


# --- Validation ---

def _validate_lines(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list) or not items:
        raise OrderError(400, "No items provided")
    lines = []
    for item in items:
        if not isinstance(item, dict) or not item.get("productId"):
            raise OrderError(400, "Invalid item: productId is required")
        try:
            quantity = int(item.get("quantity") or 0)
        except (TypeError, ValueError):
            quantity = 0
        if quantity < 1:
            raise OrderError(400, "Invalid item: quantity must be at least 1")
        lines.append({"product_id": str(item["productId"]), "quantity": quantity, "variant_id": item.get("variantId")})
    return lines


def price_lines(lines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Résout chaque ligne au prix du catalogue; le premier produit introuvable interrompt tout."""
    priced = []
    for line in lines:
        try:
            resolved = catalog_service.resolve_line(line["product_id"], line.get("variant_id"))
        except CatalogNotFound:
            raise _server_error(f"Product not found: {line['product_id']}")
        except FulfillmentError as e:
            raise _server_error(e.message)
        resolved["quantity"] = line["quantity"]
        priced.append(resolved)
    return priced


def order_total(priced: List[Dict[str, Any]]) -> float:
    return round(sum(float(p["price"]) * int(p["quantity"]) for p in priced), 2)


def to_minor_units(amount: float) -> int:
    # Arrondi commercial (0.5 -> supérieur), indépendant de l'arrondi bancaire de round()
    return int(math.floor(amount * 100 + 0.5))


# --- Fulfillment ---

def build_fulfillment_payload(order_id: str, items: List[Dict[str, Any]], address: Dict[str, Any], email: Optional[str]) -> Dict[str, Any]:
    return {
        "external_id": str(order_id),
        "line_items": [
            {"product_id": item["product_id"], "variant_id": item.get("variant_id"), "quantity": int(item["quantity"])}
            for item in items
        ],
        "shipping_method": PRINTIFY_SHIPPING_METHOD,
        "shipping_address": {
            "first_name": address.get("firstName"),
            "last_name": address.get("lastName"),
            "address1": address.get("address1"),
            "address2": address.get("address2") or "",
            "city": address.get("city"),
            "state": address.get("state"),
            "country": address.get("country"),
            "zip": address.get("zip"),
            "phone": address.get("phone"),
            "email": email,
        },
    }


def submit_fulfillment(order_id: str, items: List[Dict[str, Any]], address: Dict[str, Any], email: Optional[str]) -> Optional[str]:
    """
    Soumet la commande à Printify. Retourne l'id Printify, ou None si l'envoi échoue
    (la commande reste alors 'pending' sans référence de fulfillment).
    """
    payload = build_fulfillment_payload(order_id, items, address, email)
    try:
        created = printify_client.create_order(PRINTIFY_SHOP_ID, payload)
    except Exception:
        logger.exception("orders.service.submit_fulfillment failed order_id=%s", order_id)
        return None
    printify_order_id = str((created or {}).get("id") or "")
    if not printify_order_id:
        logger.error("orders.service.submit_fulfillment no id returned order_id=%s", order_id)
        return None
    repository.mark_processing(order_id, printify_order_id)
    return printify_order_id


def _compensate(payment_intent_id: str, order_id: Optional[str] = None) -> None:
    if order_id:
        repository.delete_order(order_id)
    try:
        stripe_client.refund(payment_intent_id)
        logger.warning("orders.service refunded payment=%s order_id=%s", payment_intent_id, order_id)
    except Exception:
        logger.exception("orders.service refund failed payment=%s order_id=%s", payment_intent_id, order_id)


def _cancel_intent(payment_intent_id: Optional[str]) -> None:
    """Annule un PaymentIntent non abouti (requires_action, processing...)."""
    if not payment_intent_id:
        return
    try:
        stripe_client.cancel_payment(payment_intent_id)
    except stripe.StripeError:
        logger.exception("orders.service cancel failed payment=%s", payment_intent_id)


# module printstream.orders.service
def create_order(
    user: Dict[str, Any],
    items: Any,
    shipping_address: Any,
    payment_method_id: Optional[str],
) -> Dict[str, Any]:
    lines = _validate_lines(items)
    if not isinstance(shipping_address, dict):
        raise OrderError(400, "Shipping address is required")
    is_valid, errors = validate_address(shipping_address)
    if not is_valid:
        raise OrderError(400, "Invalid shipping address", errors=errors)
    if not payment_method_id:
        raise OrderError(400, "Payment method is required")

    priced = price_lines(lines)
    total = order_total(priced)

    try:
        intent = stripe_client.charge(
            amount=to_minor_units(total),
            payment_method_id=payment_method_id,
            customer_id=user.get("stripe_customer_id"),
            metadata={"userId": str(user.get("id"))},
        )
    except stripe.StripeError as e:
        logger.exception("orders.service.create_order charge failed user_id=%s", user.get("id"))
        raise _server_error(getattr(e, "user_message", None) or str(e))
    payment_id = intent.get("id")
    if intent.get("status") != "succeeded":
        logger.warning("orders.service.create_order payment not completed payment=%s status=%s", payment_id, intent.get("status"))
        _cancel_intent(payment_id)
        raise _server_error(f"Payment not completed: {intent.get('status')}")

    try:
        order = repository.insert_order(
            user_id=user["id"],
            total_amount=total,
            stripe_payment_id=payment_id,
            shipping_address=shipping_address,
        )
    except Exception as e:
        logger.exception("orders.service.create_order insert failed user_id=%s payment=%s", user.get("id"), payment_id)
        _compensate(payment_id)
        raise _server_error(str(e))

    try:
        repository.insert_order_items(order["id"], priced)
    except Exception as e:
        logger.exception("orders.service.create_order items insert failed order_id=%s", order["id"])
        _compensate(payment_id, order["id"])
        raise _server_error(str(e))

    printify_order_id = submit_fulfillment(order["id"], priced, shipping_address, user.get("email"))
    return {
        "order_id": order["id"],
        "status": "processing" if printify_order_id else "pending",
        "total_amount": total,
    }


def list_user_orders(user_id: str, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    page = max(int(page or 1), 1)
    limit = max(int(limit or DEFAULT_PAGE_SIZE), 1)
    rows, total = repository.list_user_orders(user_id, page=page, limit=limit)
    return {
        "orders": rows,
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total_orders": total,
    }


def get_order_for(user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    """
    Détail d'une commande pour son propriétaire ou un admin.
    Enrichi du statut Printify en direct quand disponible (échec journalisé, champ omis).
    """
    order = repository.get_order(order_id)
    if not order:
        raise OrderError(404, "Order not found")
    if user.get("role") != "admin" and order.get("user_id") != user.get("id"):
        raise OrderError(403, "Unauthorized")
    if order.get("printify_order_id"):
        try:
            order["printifyDetails"] = printify_client.get_order(PRINTIFY_SHOP_ID, order["printify_order_id"])
        except Exception:
            logger.exception("orders.service.get_order_for printify lookup failed order_id=%s", order_id)
    return order


def resubmit_fulfillment(order_id: str) -> Dict[str, Any]:
    """Remédiation admin: renvoie à Printify une commande payée restée sans fulfillment."""
    order = repository.get_order(order_id)
    if not order:
        raise OrderError(404, "Order not found")
    if order.get("printify_order_id"):
        raise OrderError(400, "Order already submitted for fulfillment")
    if order.get("status") != "pending":
        raise OrderError(400, f"Order cannot be fulfilled in status {order.get('status')}")
    items = order.get("order_items") or []
    if not items:
        raise OrderError(400, "Order has no items")
    address = order.get("shipping_address") or {}
    email = address.get("email") or (profiles_repository.get_profile(order.get("user_id")) or {}).get("email")
    printify_order_id = submit_fulfillment(order_id, items, address, email)
    if not printify_order_id:
        raise _server_error("Fulfillment submission failed")
    return {"order_id": order_id, "printify_order_id": printify_order_id, "status": "processing"}
