import logging
from typing import Any, Dict, List

from printstream.admin import repository as admin_repository
from printstream.catalog import service as catalog_service

logger = logging.getLogger(__name__)

REVENUE_STATUSES = ("delivered",)
ACTIVE_STATUSES = ("active", "trialing")


def _product_stats() -> Dict[str, int]:
    # Catalogue Printify: 0 si l'amont est indisponible
    try:
        products = catalog_service.fetch_all_products()
    except Exception:
        logger.exception("admin.service._product_stats failed")
        return {"total": 0, "active": 0}
    return {"total": len(products), "active": sum(1 for p in products if p.get("visible"))}


def _recent_orders() -> List[Dict[str, Any]]:
    out = []
    for o in admin_repository.fetch_recent_orders(5):
        u = o.get("user") or {}
        out.append({
            **o,
            "totalAmount": float(o.get("total_amount") or 0),
            "user": {"firstName": u.get("first_name"), "lastName": u.get("last_name")},
        })
    return out


def _recent_users() -> List[Dict[str, Any]]:
    return [
        {
            **u,
            "firstName": u.get("first_name"),
            "lastName": u.get("last_name"),
            "subscriptionStatus": u.get("subscription_status"),
        }
        for u in admin_repository.fetch_recent_users(5)
    ]


# module printstream.admin.service
def dashboard_stats() -> Dict[str, Any]:
    """
    Agrège les indicateurs du tableau de bord admin.
    - revenue: somme des total_amount des commandes livrées
    - orders.processing: total - pending
    """
    total_orders = admin_repository.count_table_rows("orders")
    pending_orders = admin_repository.count_table_rows("orders", eq={"status": "pending"})
    revenue = sum(float(r.get("total_amount") or 0) for r in admin_repository.fetch_revenue_rows(REVENUE_STATUSES))
    return {
        "users": {
            "total": admin_repository.count_table_rows("profiles"),
            "activeSubscribers": admin_repository.count_table_rows("profiles", in_={"subscription_status": ACTIVE_STATUSES}),
        },
        "videos": {
            "total": admin_repository.count_table_rows("videos"),
            "exclusive": admin_repository.count_table_rows("videos", eq={"is_exclusive": True}),
        },
        "products": _product_stats(),
        "orders": {
            "total": total_orders,
            "pending": pending_orders,
            "processing": max(total_orders - pending_orders, 0),
        },
        "revenue": {"total": round(revenue, 2)},
        "recentOrders": _recent_orders(),
        "recentUsers": _recent_users(),
    }
