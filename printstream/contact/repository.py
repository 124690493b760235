from typing import Any, Dict, List, Optional
import logging

import printstream.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

MESSAGE_STATUSES = ("new", "read", "replied")


# module printstream.contact.repository
def list_messages() -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("contact_messages")
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []


def insert_message(data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("contact_messages")
        .insert({**data, "status": "new"})
        .execute()
    )
    rows = res.data or []
    return rows[0] if isinstance(rows, list) and rows else None


def update_status(message_id: str, status: str) -> Optional[dict]:
    """Met à jour le statut; None si aucun message ne correspond."""
    res = (
        supabase_client.get_service_supabase()
        .table("contact_messages")
        .update({"status": status})
        .eq("id", message_id)
        .execute()
    )
    rows = res.data or []
    return rows[0] if isinstance(rows, list) and rows else None
