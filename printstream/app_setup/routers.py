"""
Registre central des routers.
- API: auth, users, products, orders, subscriptions, webhooks, contact, videos
- Back-office: admin, analytics
- Health
"""
from fastapi import FastAPI
from printstream.auth.views import router as auth_router
from printstream.profiles.views import router as users_router
from printstream.catalog.views import router as products_router
from printstream.orders.views import router as orders_router
from printstream.subscriptions.views import router as subscriptions_router, webhook_router
from printstream.contact.views import router as contact_router
from printstream.videos.views import router as videos_router
from printstream.admin.views import router as admin_router
from printstream.analytics.views import router as analytics_router
from printstream.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    # API
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(subscriptions_router)
    app.include_router(webhook_router)
    app.include_router(contact_router)
    app.include_router(videos_router)
    # Back-office
    app.include_router(admin_router)
    app.include_router(analytics_router)
    # Health & monitoring
    app.include_router(health_router)
