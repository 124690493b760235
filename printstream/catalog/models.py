from typing import Any, Dict, List, Optional

from printstream.models.base import CamelModel


class ProductSummary(CamelModel):
    id: str
    title: str
    description: str = ""
    price: float
    image_url: str = ""
    is_published: bool = False
    tags: List[str] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProductDetail(ProductSummary):
    images: List[Dict[str, Any]] = []
    variants: List[Dict[str, Any]] = []
    default_variant_id: Optional[int] = None


class ProductListResponse(CamelModel):
    products: List[ProductSummary]
    total_pages: int
    current_page: int
    total_products: int


class ProductResponse(CamelModel):
    product: ProductDetail


class ShippingEstimate(CamelModel):
    method: str
    price: float
    estimated_days: str


class ShippingEstimatesResponse(CamelModel):
    shipping_estimates: List[ShippingEstimate]


class CategoriesResponse(CamelModel):
    categories: List[str]
