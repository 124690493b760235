"""Endpoints catalogue (lecture seule, publics)."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from printstream.catalog import service as catalog_service
from printstream.catalog.models import (
    CategoriesResponse,
    ProductListResponse,
    ProductResponse,
    ShippingEstimatesResponse,
)
from printstream.infra.printify_client import CatalogNotFound, FulfillmentError
from printstream.utils.errors import server_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["Products API"])


@router.get("", response_model=ProductListResponse)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(catalog_service.DEFAULT_LIMIT, ge=1, le=100),
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "newest",
):
    """
    Liste paginée du catalogue.
    - Filtres: category (sous-chaîne dans les tags), search (titre/description)
    - Erreur amont: 500 avec le message Printify
    """
    try:
        result = catalog_service.list_products(page=page, limit=limit, category=category, search=search, sort=sort)
    except FulfillmentError as e:
        logger.exception("catalog.views.list_products failed")
        raise server_error(e)
    return {
        "products": result["items"],
        "total_pages": result["total_pages"],
        "current_page": result["current_page"],
        "total_products": result["total_count"],
    }


@router.get("/categories", response_model=CategoriesResponse)
def list_categories():
    return {"categories": catalog_service.categories()}


@router.get("/shipping", response_model=ShippingEstimatesResponse)
def shipping_estimates():
    return {"shipping_estimates": catalog_service.shipping_estimates()}


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str):
    try:
        product = catalog_service.get_product(product_id)
    except CatalogNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except FulfillmentError as e:
        logger.exception("catalog.views.get_product failed id=%s", product_id)
        raise server_error(e)
    return {"product": product}
