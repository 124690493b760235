from fastapi import Request, HTTPException, Depends
from fastapi.responses import Response
from typing import Optional, Dict, Any
import logging

from printstream.config import COOKIE_SECURE
from printstream.profiles import repository as profiles_repository

logger = logging.getLogger(__name__)

COOKIE_NAME = "sb-access-token"
ACTIVE_STATUSES = ("active", "trialing")

"""
Access Gate: résolution de l'identité et prédicats d'accès.
- get_current_user: Bearer prioritaire, fallback cookie de session; fusionne user GoTrue + profil.
- require_user / require_admin / require_subscription: dépendances FastAPI (Depends).
- Les refus ont lieu avant tout effet de bord du handler.
"""

def set_session_cookie(response: Response, access_token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="Lax",
        max_age=60 * 60,
        path="/",
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")

def extract_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None

def resolve_user(token: str) -> Dict[str, Any]:
    """
    Résout le token via Supabase Auth puis fusionne le profil applicatif.
    Profil absent => rôle 'user', abonnement 'none'.
    """
    auth_user = profiles_repository.get_auth_user(token)
    uid = auth_user.get("id")
    if not uid:
        raise HTTPException(status_code=401, detail="Unauthorized")
    profile = profiles_repository.get_profile(uid) or {}
    user: Dict[str, Any] = {"role": "user", "subscription_status": "none"}
    user.update({"id": uid, "email": auth_user.get("email"), "metadata": auth_user.get("user_metadata") or {}})
    user.update({k: v for k, v in profile.items() if v is not None})
    user["id"] = uid
    user["token"] = token
    return user

def get_current_user(request: Request) -> Dict[str, Any]:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return resolve_user(token)
    except HTTPException:
        raise
    except Exception:
        logger.info("security.get_current_user rejected token")
        raise HTTPException(status_code=401, detail="Unauthorized")

def get_optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """Variante tolérante pour les endpoints publics: None si absent ou invalide."""
    token = extract_token(request)
    if not token:
        return None
    try:
        return resolve_user(token)
    except Exception:
        return None

def is_admin(user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user.get("role") == "admin"

def has_active_subscription(user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user.get("subscription_status") in ACTIVE_STATUSES

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user

def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return user

def require_subscription(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not has_active_subscription(user):
        raise HTTPException(status_code=403, detail="Forbidden: Active subscription required")
    return user
