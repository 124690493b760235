# printstream.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale de l'API printstream.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Printify)
- Expose les réglages transverses: cookies, CORS/hosts, logs, stockage vidéo
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_list(name: str, default: str) -> list:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]

# Supabase: URL et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(
    os.getenv("SUPABASE_ANON_KEY")
    or os.getenv("SUPABASE_KEY")
    or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")
    or ""
)
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")
CORS_ORIGINS = _env_list("CORS_ORIGINS", "*")
ALLOWED_HOSTS = _env_list("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

# Stripe: clés et secret webhook
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or os.getenv("NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_CURRENCY = _clean_env(os.getenv("STRIPE_CURRENCY") or "usd").lower()

# Offre d'abonnement de repli (affichée si aucun produit Stripe actif)
FALLBACK_PLAN_PRODUCT_ID = _clean_env(os.getenv("FALLBACK_PLAN_PRODUCT_ID") or "prod_SbY9KDnAiFVej2")
FALLBACK_PLAN_PRICE_ID = _clean_env(os.getenv("FALLBACK_PLAN_PRICE_ID") or "price_1RgL2yK1JuQJRnYFwaZc2Qr4")
SUBSCRIPTION_MONTHLY_PRICE = float(os.getenv("SUBSCRIPTION_MONTHLY_PRICE", "2.99"))

# Printify: catalogue et fulfillment
PRINTIFY_API_URL = _clean_env(os.getenv("PRINTIFY_API_URL") or "https://api.printify.com/v1").rstrip("/")
PRINTIFY_API_KEY = _clean_env(os.getenv("PRINTIFY_API_KEY") or "")
PRINTIFY_SHOP_ID = _clean_env(os.getenv("PRINTIFY_SHOP_ID") or "")
PRINTIFY_TIMEOUT = float(os.getenv("PRINTIFY_TIMEOUT", "30"))
PRINTIFY_SHIPPING_METHOD = int(os.getenv("PRINTIFY_SHIPPING_METHOD", "1"))

# Stockage des vidéos (Supabase Storage)
VIDEOS_BUCKET = _clean_env(os.getenv("VIDEOS_BUCKET") or "videos")
SIGNED_URL_TTL = int(os.getenv("SIGNED_URL_TTL", "3600"))

LOG_LEVEL = _clean_env(os.getenv("LOG_LEVEL") or "info").upper()

# Secrets sans lesquels une partie de l'API ne fonctionne pas (vérifiés au démarrage)
REQUIRED_SETTINGS = {
    "SUPABASE_URL": SUPABASE_URL,
    "SUPABASE_ANON_KEY": SUPABASE_ANON_KEY,
    "SUPABASE_SERVICE_KEY": SUPABASE_SERVICE_KEY,
    "STRIPE_SECRET_KEY": STRIPE_SECRET_KEY,
    "STRIPE_WEBHOOK_SECRET": STRIPE_WEBHOOK_SECRET,
    "PRINTIFY_API_KEY": PRINTIFY_API_KEY,
    "PRINTIFY_SHOP_ID": PRINTIFY_SHOP_ID,
}
