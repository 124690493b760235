from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from printstream.models.base import CamelModel


class CreateOrderRequest(BaseModel):
    # Validation métier (400 explicites) déléguée au service
    items: Optional[List[Dict[str, Any]]] = None
    shippingAddress: Optional[Dict[str, Any]] = None
    paymentMethodId: Optional[str] = None


class OrderCreatedResponse(CamelModel):
    message: str
    order_id: str


class UserOrdersResponse(CamelModel):
    orders: List[Dict[str, Any]]
    total_pages: int
    current_page: int
    total_orders: int


class OrderResponse(CamelModel):
    order: Dict[str, Any]


class UnfulfilledOrdersResponse(CamelModel):
    orders: List[Dict[str, Any]]
    count: int


class FulfillmentResponse(CamelModel):
    message: str
    order_id: str
    printify_order_id: str
    status: str
