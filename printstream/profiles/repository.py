"""
Accès aux données pour la feature 'profiles' (table profiles + GoTrue).
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

import printstream.infra.supabase_client as supabase_client
from printstream.config import SUPABASE_URL, SUPABASE_ANON_KEY

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _first(data: Any) -> Optional[dict]:
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


# module printstream.profiles.repository
def get_auth_user(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}


def get_profile(user_id: str) -> Optional[dict]:
    """Profil applicatif (table profiles) ou None si absent / erreur."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("profiles.repository.get_profile failed id=%s", user_id)
        return None


def create_profile(user_id: str, email: str, first_name: str = "", last_name: str = "") -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .upsert({
                "id": user_id,
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "role": "user",
                "subscription_status": "none",
            })
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("profiles.repository.create_profile failed id=%s", user_id)
        return None


def update_profile(user_id: str, data: Dict[str, Any]) -> Optional[dict]:
    try:
        payload = dict(data)
        payload["updated_at"] = _now_iso()
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .update(payload)
            .eq("id", user_id)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("profiles.repository.update_profile failed id=%s", user_id)
        return None


def set_billing_customer(user_id: str, customer_id: str) -> bool:
    return update_profile(user_id, {"stripe_customer_id": customer_id}) is not None


def mirror_subscription(user_id: str, status: str, end_date: Optional[str]) -> bool:
    """Recopie statut et fin de période d'abonnement sur le profil."""
    return update_profile(user_id, {"subscription_status": status, "subscription_end_date": end_date}) is not None


def set_subscription_status(user_id: str, status: str) -> bool:
    return update_profile(user_id, {"subscription_status": status}) is not None


def update_password(user_token: str, new_password: str) -> httpx.Response:
    """Appel direct GoTrue pour mettre à jour le mot de passe:
    - httpx PUT /auth/v1/user avec Authorization: Bearer <user_token>
    - apikey (SUPABASE_ANON_KEY) requis; timeout de 10s
    """
    url = f"{SUPABASE_URL.rstrip('/')}/auth/v1/user"
    headers = {
        "Authorization": f"Bearer {user_token}",
        "apikey": SUPABASE_ANON_KEY,
        "Content-Type": "application/json",
    }
    return httpx.put(url, json={"password": new_password}, headers=headers, timeout=10)
