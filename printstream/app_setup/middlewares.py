"""
Middlewares transverses de l'API.
- register_basic_middlewares: session, CORS, TrustedHost et confiance en X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité et protection CSRF (double soumission cookie/header).
- register_no_cache_middleware: empêche la mise en cache sous /api/admin et /api/users.
- register_force_https_middleware: redirection HTTPS derrière un proxy.
Notes:
- L'ordre d'ajout compte: le middleware HTTPS est ajouté en dernier pour s'exécuter en premier.
- Le webhook Stripe est exempté du CSRF (signé par Stripe, sans cookie).
"""
import secrets
from typing import Optional

from fastapi import Request, FastAPI
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from printstream.config import SUPABASE_URL, COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS, SESSION_SECRET_KEY
from printstream.utils.security import COOKIE_NAME as SESSION_COOKIE_NAME

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_EXEMPT_PATHS = {
    "/api/webhooks/stripe",
}
STATE_CHANGING_METHODS = ("POST", "PUT", "PATCH", "DELETE")
NO_CACHE_PREFIXES = ("/api/admin", "/api/users")


def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])


def csrf_required(request: Request) -> bool:
    """Requête mutative authentifiée par cookie, hors chemins exemptés."""
    return (
        request.method.upper() in STATE_CHANGING_METHODS
        and bool(request.cookies.get(SESSION_COOKIE_NAME))
        and request.url.path not in CSRF_EXEMPT_PATHS
    )


def csrf_token_valid(request: Request) -> bool:
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    header_token = request.headers.get(CSRF_HEADER_NAME, "")
    return bool(cookie_token and header_token) and secrets.compare_digest(header_token, cookie_token)


def register_security_middleware(app: FastAPI) -> None:
    """
    - CSRF: X-CSRF-Token doit égaler le cookie csrf_token sur les requêtes mutatives
      authentifiées par cookie. Les appels Bearer ne sont pas concernés.
    - En-têtes: X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy, HSTS (si secure).
    - Dépose un cookie CSRF si manquant (httponly=False pour que le front lise la valeur).
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)
        new_csrf_token: Optional[str] = None if csrf_cookie else secrets.token_urlsafe(32)

        if csrf_required(request) and not csrf_token_valid(request):
            return JSONResponse(status_code=403, content={"message": "CSRF verification failed"})

        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")

        csp_connect = ["'self'"]
        if SUPABASE_URL:
            csp_connect.append(SUPABASE_URL.rstrip("/"))
        swagger_cdns = ["https://cdn.jsdelivr.net", "https://unpkg.com"]
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: blob: https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"connect-src {' '.join(csp_connect)}"
        )
        response.headers.setdefault("Content-Security-Policy", csp)

        if new_csrf_token:
            response.set_cookie(
                key=CSRF_COOKIE_NAME,
                value=new_csrf_token,
                httponly=False,
                secure=COOKIE_SECURE,
                samesite="Lax",
                max_age=60 * 60,
                path="/",
            )
        return response


def register_no_cache_middleware(app: FastAPI) -> None:
    """Données personnelles et back-office: jamais mises en cache."""
    @app.middleware("http")
    async def no_cache_for_protected(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(NO_CACHE_PREFIXES):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response


def register_force_https_middleware(app: FastAPI) -> None:
    """Redirige HTTP -> HTTPS lorsqu'un proxy place x-forwarded-proto=http."""
    @app.middleware("http")
    async def force_https(request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "http":
            url = str(request.url.replace(scheme="https"))
            return RedirectResponse(url, status_code=301)
        return await call_next(request)
