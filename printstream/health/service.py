from urllib.parse import urlparse
import socket
import logging

import printstream.infra.supabase_client as supabase_client
from printstream.config import SUPABASE_URL

logger = logging.getLogger(__name__)

PROBED_TABLES = ["profiles", "orders", "subscriptions", "videos", "contact_messages"]


def _check_table(client, name: str):
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def _resolve(hostname: str):
    try:
        socket.getaddrinfo(hostname, 443)
        return True, None
    except OSError as e:
        return False, str(e)


def health_supabase_info():
    """Diagnostic Supabase: résolution DNS de l'hôte puis lecture d'une ligne par table."""
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok, dns_error = _resolve(hostname) if hostname else (None, None)

    info = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_service_supabase()
        for t in PROBED_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        logger.warning("health.supabase client unavailable: %s", e)
        info["error"] = str(e)
    return info
