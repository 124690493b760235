"""
Catalog Adapter: lecture du catalogue Printify, mise en forme et filtrage en mémoire.

- Aucune mise en cache: chaque appel relit le catalogue amont.
- Prix = prix (unités mineures) de la première variante activée / 100.
- Image = aperçu de la première variante, sinon première image produit.
- Les erreurs amont (FulfillmentError) remontent telles quelles à la vue.
"""
import math
from typing import Any, Dict, List, Optional

from printstream.config import PRINTIFY_SHOP_ID
from printstream.infra import printify_client
from printstream.infra.printify_client import CatalogNotFound

DEFAULT_LIMIT = 12
CATEGORIES = ["Canvas Print", "Wall Art", "Home Decor"]
SHIPPING_ESTIMATES = [
    {"method": "Standard Shipping", "price": 5.99, "estimated_days": "5-7"},
    {"method": "Express Shipping", "price": 12.99, "estimated_days": "2-3"},
]
SORTS = {
    "newest": (lambda p: p.get("created_at") or "", True),
    "oldest": (lambda p: p.get("created_at") or "", False),
    "price_asc": (lambda p: unit_price(p), False),
    "price_desc": (lambda p: unit_price(p), True),
    "title": (lambda p: (p.get("title") or "").lower(), False),
}


# --- Helpers de mise en forme ---

def enabled_variants(product: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [v for v in (product.get("variants") or []) if v.get("is_enabled") is not False]


def to_major(minor: Any) -> float:
    try:
        return round(float(minor) / 100, 2)
    except (TypeError, ValueError):
        return 0.0


def unit_price(product: Dict[str, Any]) -> float:
    variants = enabled_variants(product)
    if not variants:
        return 0.0
    return to_major(variants[0].get("price"))


def image_url(product: Dict[str, Any]) -> str:
    variants = product.get("variants") or []
    if variants and variants[0].get("preview_image_url"):
        return variants[0]["preview_image_url"]
    images = product.get("images") or []
    if images:
        return images[0].get("src") or ""
    return ""


def format_product(product: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(product.get("id") or ""),
        "title": product.get("title") or "",
        "description": product.get("description") or "",
        "price": unit_price(product),
        "image_url": image_url(product),
        "is_published": bool(product.get("visible")),
        "tags": list(product.get("tags") or []),
        "created_at": product.get("created_at"),
        "updated_at": product.get("updated_at"),
    }


def format_product_detail(product: Dict[str, Any]) -> Dict[str, Any]:
    variants = enabled_variants(product)
    detail = format_product(product)
    detail.update({
        "images": list(product.get("images") or []),
        "variants": variants,
        "default_variant_id": variants[0].get("id") if variants else None,
    })
    return detail


# --- Filtrage ---

def _matches_category(product: Dict[str, Any], category: str) -> bool:
    needle = category.lower()
    return any(needle in str(tag).lower() for tag in (product.get("tags") or []))


def _matches_search(product: Dict[str, Any], search: str) -> bool:
    needle = search.lower()
    return needle in (product.get("title") or "").lower() or needle in (product.get("description") or "").lower()


def fetch_all_products() -> List[Dict[str, Any]]:
    raw = printify_client.list_products(PRINTIFY_SHOP_ID)
    if isinstance(raw, dict):
        return list(raw.get("data") or [])
    return list(raw or [])


# module printstream.catalog.service
def list_products(
    *,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "newest",
) -> Dict[str, Any]:
    """
    Liste filtrée + paginée (tranche en mémoire après lecture complète du catalogue amont).
    Retour: {items, total_pages, current_page, total_count}
    """
    page = max(int(page or 1), 1)
    limit = max(int(limit or DEFAULT_LIMIT), 1)
    products = fetch_all_products()
    if category:
        products = [p for p in products if _matches_category(p, category)]
    if search:
        products = [p for p in products if _matches_search(p, search)]
    key, reverse = SORTS.get(sort or "newest", SORTS["newest"])
    products = sorted(products, key=key, reverse=reverse)

    total = len(products)
    offset = (page - 1) * limit
    return {
        "items": [format_product(p) for p in products[offset:offset + limit]],
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total_count": total,
    }


def get_raw_product(product_id: str) -> Dict[str, Any]:
    product = printify_client.get_product(PRINTIFY_SHOP_ID, product_id)
    if not product:
        raise CatalogNotFound(f"Product not found: {product_id}", status_code=404)
    return product


def get_product(product_id: str) -> Dict[str, Any]:
    return format_product_detail(get_raw_product(product_id))


def resolve_line(product_id: str, variant_id: Any = None) -> Dict[str, Any]:
    """
    Prix et variante faisant autorité pour une ligne de panier.
    - variant_id fourni: doit désigner une variante activée du produit.
    - sinon: variante par défaut (première activée).
    Lève CatalogNotFound si le produit ou la variante est introuvable.
    """
    try:
        product = get_raw_product(product_id)
    except CatalogNotFound:
        raise CatalogNotFound(f"Product not found: {product_id}", status_code=404)
    variants = enabled_variants(product)
    if variant_id not in (None, ""):
        variant = next((v for v in variants if str(v.get("id")) == str(variant_id)), None)
    else:
        variant = variants[0] if variants else None
    if variant is None:
        raise CatalogNotFound(f"Product not found: {product_id}", status_code=404)
    return {
        "product_id": str(product.get("id") or product_id),
        "variant_id": variant.get("id"),
        "title": product.get("title") or "",
        "image_url": image_url(product),
        "price": to_major(variant.get("price")),
    }


def categories() -> List[str]:
    return list(CATEGORIES)


def shipping_estimates() -> List[Dict[str, Any]]:
    return [dict(e) for e in SHIPPING_ESTIMATES]
