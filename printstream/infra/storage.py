"""Supabase Storage: URLs signées et suppression d'objets (bucket vidéos)."""
import logging
from typing import Optional

import printstream.infra.supabase_client as supabase_client
from printstream.config import VIDEOS_BUCKET, SIGNED_URL_TTL

logger = logging.getLogger(__name__)


def create_signed_url(path: str, expires_in: int = SIGNED_URL_TTL, bucket: str = VIDEOS_BUCKET) -> Optional[str]:
    """
    Génère une URL signée à durée limitée pour un objet du bucket.
    Retourne None en cas d'échec (l'erreur est journalisée).
    """
    if not path:
        return None
    try:
        res = supabase_client.get_service_supabase().storage.from_(bucket).create_signed_url(path, expires_in)
        if isinstance(res, dict):
            return res.get("signedURL") or res.get("signedUrl") or res.get("signed_url")
        return getattr(res, "signed_url", None) or getattr(res, "signedURL", None)
    except Exception:
        logger.exception("infra.storage.create_signed_url failed bucket=%s path=%s", bucket, path)
        return None


def remove_object(path: str, bucket: str = VIDEOS_BUCKET) -> bool:
    try:
        supabase_client.get_service_supabase().storage.from_(bucket).remove([path])
        return True
    except Exception:
        logger.exception("infra.storage.remove_object failed bucket=%s path=%s", bucket, path)
        return False


def object_path_from_url(url: str, folder: str = "videos") -> str:
    """Chemin de stockage '<folder>/<nom de fichier>' déduit de l'URL publique."""
    filename = (url or "").split("?")[0].rstrip("/").split("/")[-1]
    return f"{folder}/{filename}" if filename else ""
