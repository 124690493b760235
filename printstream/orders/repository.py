"""
Accès aux données pour la feature 'orders' (tables orders, order_items).

Les écritures lèvent en cas d'échec (le service décide de la compensation);
les lectures retournent des valeurs neutres ([], None) et journalisent.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import printstream.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)


def _first(data: Any) -> Optional[dict]:
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


# module printstream.orders.repository
def insert_order(
    *,
    user_id: str,
    total_amount: float,
    stripe_payment_id: str,
    shipping_address: Dict[str, Any],
) -> dict:
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .insert({
            "user_id": user_id,
            "status": "pending",
            "total_amount": total_amount,
            "stripe_payment_id": stripe_payment_id,
            "shipping_address": shipping_address,
        })
        .execute()
    )
    row = _first(res.data)
    if not row or not row.get("id"):
        raise RuntimeError("Order insert returned no row")
    return row


def insert_order_items(order_id: str, items: List[Dict[str, Any]]) -> None:
    rows = [
        {
            "order_id": order_id,
            "product_id": item["product_id"],
            "quantity": item["quantity"],
            "price": item["price"],
            "title": item.get("title"),
            "image_url": item.get("image_url"),
            "variant_id": item.get("variant_id"),
        }
        for item in items
    ]
    supabase_client.get_service_supabase().table("order_items").insert(rows).execute()


def delete_order(order_id: str) -> bool:
    try:
        supabase_client.get_service_supabase().table("orders").delete().eq("id", order_id).execute()
        return True
    except Exception:
        logger.exception("orders.repository.delete_order failed id=%s", order_id)
        return False


def mark_processing(order_id: str, printify_order_id: str) -> bool:
    try:
        (
            supabase_client.get_service_supabase()
            .table("orders")
            .update({"printify_order_id": printify_order_id, "status": "processing"})
            .eq("id", order_id)
            .execute()
        )
        return True
    except Exception:
        logger.exception("orders.repository.mark_processing failed id=%s", order_id)
        return False


def get_order(order_id: str) -> Optional[dict]:
    """Commande + lignes (order_items) ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*, order_items(*)")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        return None


def list_user_orders(user_id: str, *, page: int, limit: int) -> Tuple[List[dict], int]:
    """Commandes de l'utilisateur, plus récentes d'abord. Retour: (rows, total)."""
    offset = (page - 1) * limit
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .select("*, order_items(*)", count="exact")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .range(offset, offset + limit - 1)
        .execute()
    )
    rows = res.data or []
    count = getattr(res, "count", None)
    return rows, int(count) if isinstance(count, int) else len(rows)


def list_unfulfilled(limit: int = 100) -> List[dict]:
    """Commandes payées sans référence de fulfillment (vue de remédiation admin)."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*, order_items(*)")
            .eq("status", "pending")
            .is_("printify_order_id", "null")
            .order("created_at", desc=False)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_unfulfilled failed")
        return []
