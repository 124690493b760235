from typing import Any, Dict, List, Optional, Sequence
from printstream.infra.supabase_client import get_service_supabase
import logging

logger = logging.getLogger(__name__)


# module printstream.admin.repository
def count_table_rows(
    table_name: str,
    *,
    eq: Optional[Dict[str, Any]] = None,
    in_: Optional[Dict[str, Sequence[Any]]] = None,
) -> int:
    """
    Compte les lignes d'une table via Supabase (filtres eq / in optionnels).
    Utilise count='exact' si disponible, sinon fallback sur len(data).
    """
    try:
        query = get_service_supabase().table(table_name).select("id", count="exact")
        for column, value in (eq or {}).items():
            query = query.eq(column, value)
        for column, values in (in_ or {}).items():
            query = query.in_(column, list(values))
        res = query.execute()
        if getattr(res, "count", None) is not None:
            return int(res.count)  # type: ignore
        return len(res.data or [])
    except Exception:
        logger.exception("admin.repository.count_table_rows failed table=%s", table_name)
        return 0


def fetch_revenue_rows(statuses: Sequence[str]) -> List[dict]:
    try:
        res = (
            get_service_supabase()
            .table("orders")
            .select("total_amount")
            .in_("status", list(statuses))
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("admin.repository.fetch_revenue_rows failed")
        return []


def fetch_recent_orders(limit: int = 5) -> List[dict]:
    try:
        res = (
            get_service_supabase()
            .table("orders")
            .select("*, user:profiles(first_name, last_name)")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("admin.repository.fetch_recent_orders failed")
        return []


def fetch_recent_users(limit: int = 5) -> List[dict]:
    try:
        res = (
            get_service_supabase()
            .table("profiles")
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("admin.repository.fetch_recent_users failed")
        return []


def fetch_profile_statuses() -> List[dict]:
    """Statut d'abonnement + date de création de chaque profil (analytics)."""
    res = get_service_supabase().table("profiles").select("subscription_status, created_at").execute()
    return res.data or []
