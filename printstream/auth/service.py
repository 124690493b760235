from typing import Optional
import logging

import printstream.infra.supabase_client as supabase_client
from printstream.auth.models import AuthResponse, make_auth_response, handle_exception
from printstream.profiles import repository as profiles_repository

logger = logging.getLogger(__name__)


# --- Cas d'usage Auth exposés ---

def login(email: str, password: str) -> AuthResponse:
    """Connexion:
    - Délègue à supabase.auth.sign_in_with_password
    - Normalise la réponse en AuthResponse
    """
    try:
        email = (email or "").strip()
        res = supabase_client.get_supabase().auth.sign_in_with_password({"email": email, "password": password})
        return make_auth_response(res, fallback_error="Invalid credentials or email not confirmed")
    except Exception as e:
        return handle_exception("sign_in", e)


def signup(email: str, password: str, first_name: Optional[str] = None, last_name: Optional[str] = None) -> AuthResponse:
    """Inscription:
    - Crée le compte GoTrue (first_name / last_name dans user_metadata)
    - Crée le profil applicatif (role=user, subscription_status=none)
    - Sans session retournée: succès avec demande de confirmation d'email
    """
    try:
        email = (email or "").strip()
        metadata = {"first_name": (first_name or "").strip(), "last_name": (last_name or "").strip()}
        res = supabase_client.get_supabase().auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": metadata},
        })
        user = getattr(res, "user", None)
        if user is not None and getattr(user, "id", None):
            profiles_repository.create_profile(user.id, email, metadata["first_name"], metadata["last_name"])
        sess = getattr(res, "session", None)
        if sess and getattr(sess, "access_token", None):
            return make_auth_response(res)
        return AuthResponse(True, error="Signup successful, please check your email")
    except Exception as e:
        msg = str(e).lower()
        if any(k in msg for k in ["already", "register", "exists", "23505"]):
            return AuthResponse(False, error="User already exists")
        return handle_exception("sign_up", e)
