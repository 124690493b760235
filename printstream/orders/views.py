import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query

from printstream.orders import service as orders_service
from printstream.orders.models import (
    CreateOrderRequest,
    OrderCreatedResponse,
    OrderResponse,
    UserOrdersResponse,
)
from printstream.orders.service import OrderError
from printstream.utils.errors import server_error
from printstream.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["Orders API"])


# module printstream.orders.views
@router.post("", status_code=201, response_model=OrderCreatedResponse)
def create_order(body: CreateOrderRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Crée une commande à partir du panier de l'utilisateur authentifié.
    - Entrée JSON: {items: [{productId, quantity, variantId}], shippingAddress, paymentMethodId}
    - Les prix sont relus côté serveur; tout champ price envoyé par le client est ignoré.
    - 400 panier vide / adresse invalide, 500 produit introuvable ou paiement refusé.
    """
    try:
        result = orders_service.create_order(user, body.items, body.shippingAddress, body.paymentMethodId)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail())
    logger.info("orders.create order_id=%s status=%s user_id=%s", result["order_id"], result["status"], user.get("id"))
    return {"message": "Order created successfully", "order_id": str(result["order_id"])}


@router.get("/user", response_model=UserOrdersResponse)
def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(orders_service.DEFAULT_PAGE_SIZE, ge=1, le=100),
    user: Dict[str, Any] = Depends(require_user),
):
    try:
        return orders_service.list_user_orders(user["id"], page=page, limit=limit)
    except Exception as e:
        logger.exception("orders.views.list_my_orders failed user_id=%s", user.get("id"))
        raise server_error(e)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, user: Dict[str, Any] = Depends(require_user)):
    """Détail d'une commande (propriétaire ou admin), enrichi du statut Printify si disponible."""
    try:
        order = orders_service.get_order_for(user, order_id)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail())
    return {"order": order}
