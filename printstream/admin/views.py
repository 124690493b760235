import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query

from printstream.admin import service as admin_service
from printstream.orders import repository as orders_repository
from printstream.orders import service as orders_service
from printstream.orders.models import FulfillmentResponse, UnfulfilledOrdersResponse
from printstream.orders.service import OrderError
from printstream.utils.security import require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/dashboard")
def dashboard() -> Dict[str, Any]:
    return admin_service.dashboard_stats()


@router.get("/orders/unfulfilled", response_model=UnfulfilledOrdersResponse)
def unfulfilled_orders(limit: int = Query(100, ge=1, le=500)):
    """Vue de remédiation: commandes payées restées 'pending' sans référence Printify."""
    rows = orders_repository.list_unfulfilled(limit)
    return {"orders": rows, "count": len(rows)}


@router.post("/orders/{order_id}/fulfill", response_model=FulfillmentResponse)
def fulfill_order(order_id: str):
    """Renvoie manuellement une commande à Printify (réutilise lignes et adresse stockées)."""
    try:
        result = orders_service.resubmit_fulfillment(order_id)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail())
    logger.info("admin.fulfill order_id=%s printify_order_id=%s", order_id, result["printify_order_id"])
    return {
        "message": "Order submitted for fulfillment",
        "order_id": str(order_id),
        "printify_order_id": result["printify_order_id"],
        "status": result["status"],
    }
