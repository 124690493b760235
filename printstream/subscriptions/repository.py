"""
Accès aux données pour la feature 'subscriptions' (table subscriptions, client service-role).
"""
import logging
from typing import Any, Dict, Optional

import printstream.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

NON_TERMINAL_STATUSES = ("active", "trialing", "past_due", "incomplete")


def _first(data: Any) -> Optional[dict]:
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


# module printstream.subscriptions.repository
def get_latest_for_user(user_id: str) -> Optional[dict]:
    """Abonnement courant: ligne la plus récente de l'utilisateur."""
    res = (
        supabase_client.get_service_supabase()
        .table("subscriptions")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    return _first(res.data)


def find_non_terminal(user_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("subscriptions")
        .select("*")
        .eq("user_id", user_id)
        .in_("status", list(NON_TERMINAL_STATUSES))
        .limit(1)
        .execute()
    )
    return _first(res.data)


def get_by_stripe_id(stripe_subscription_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("subscriptions")
        .select("*")
        .eq("stripe_subscription_id", stripe_subscription_id)
        .limit(1)
        .execute()
    )
    return _first(res.data)


def insert_subscription(
    *,
    user_id: str,
    stripe_subscription_id: str,
    stripe_price_id: str,
    status: str,
    current_period_end: Optional[str],
    cancel_at_period_end: bool,
) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("subscriptions")
        .insert({
            "user_id": user_id,
            "stripe_subscription_id": stripe_subscription_id,
            "stripe_price_id": stripe_price_id,
            "status": status,
            "current_period_end": current_period_end,
            "cancel_at_period_end": cancel_at_period_end,
        })
        .execute()
    )
    return _first(res.data)


def update_by_stripe_id(stripe_subscription_id: str, data: Dict[str, Any]) -> None:
    (
        supabase_client.get_service_supabase()
        .table("subscriptions")
        .update(data)
        .eq("stripe_subscription_id", stripe_subscription_id)
        .execute()
    )
