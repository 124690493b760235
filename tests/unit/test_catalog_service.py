import pytest

from printstream.catalog import service as catalog_service
from printstream.infra.printify_client import CatalogNotFound

CANVAS = {
    "id": "p1",
    "title": "Sunset Canvas",
    "description": "Warm evening light",
    "tags": ["Canvas Print", "Sunset"],
    "visible": True,
    "created_at": "2024-01-02T10:00:00Z",
    "variants": [
        {"id": 11, "price": 2999, "is_enabled": False, "preview_image_url": "https://img.example.com/p1-11.jpg"},
        {"id": 12, "price": 1250, "is_enabled": True},
    ],
    "images": [{"src": "https://img.example.com/p1.jpg"}],
}
WALL_ART = {
    "id": "p2",
    "title": "Forest Wall Art",
    "description": "Green pines",
    "tags": ["Wall Art"],
    "visible": False,
    "created_at": "2024-01-05T10:00:00Z",
    "variants": [{"id": 21, "price": 4500}],
    "images": [{"src": "https://img.example.com/p2.jpg"}],
}


@pytest.fixture(autouse=True)
def printify_catalog(monkeypatch):
    monkeypatch.setattr("printstream.infra.printify_client.list_products", lambda shop_id: {"data": [CANVAS, WALL_ART]})

    def fake_get_product(shop_id, product_id):
        for p in (CANVAS, WALL_ART):
            if p["id"] == product_id:
                return p
        raise CatalogNotFound("Not found", status_code=404)

    monkeypatch.setattr("printstream.infra.printify_client.get_product", fake_get_product)


def test_price_comes_from_first_enabled_variant():
    assert catalog_service.unit_price(CANVAS) == 12.5
    assert catalog_service.unit_price(WALL_ART) == 45.0
    assert catalog_service.unit_price({"variants": []}) == 0.0


def test_image_prefers_variant_preview_then_product_image():
    assert catalog_service.image_url(CANVAS) == "https://img.example.com/p1-11.jpg"
    assert catalog_service.image_url(WALL_ART) == "https://img.example.com/p2.jpg"
    assert catalog_service.image_url({}) == ""


def test_list_products_newest_first_by_default():
    result = catalog_service.list_products()
    assert [p["id"] for p in result["items"]] == ["p2", "p1"]
    assert result["total_count"] == 2
    assert result["total_pages"] == 1
    assert result["current_page"] == 1


def test_list_products_filters_category_and_search():
    by_category = catalog_service.list_products(category="canvas")
    assert [p["id"] for p in by_category["items"]] == ["p1"]

    by_search = catalog_service.list_products(search="PINES")
    assert [p["id"] for p in by_search["items"]] == ["p2"]


def test_list_products_pagination_and_sort():
    page_two = catalog_service.list_products(page=2, limit=1)
    assert [p["id"] for p in page_two["items"]] == ["p1"]
    assert page_two["total_pages"] == 2

    cheapest = catalog_service.list_products(sort="price_asc")
    assert cheapest["items"][0]["price"] == 12.5


def test_fetch_all_products_accepts_bare_list(monkeypatch):
    monkeypatch.setattr("printstream.infra.printify_client.list_products", lambda shop_id: [CANVAS])
    assert catalog_service.fetch_all_products() == [CANVAS]


def test_product_detail_lists_only_enabled_variants():
    detail = catalog_service.get_product("p1")
    assert [v["id"] for v in detail["variants"]] == [12]
    assert detail["default_variant_id"] == 12
    assert detail["is_published"] is True


def test_resolve_line_uses_default_or_requested_variant():
    line = catalog_service.resolve_line("p1")
    assert line == {
        "product_id": "p1",
        "variant_id": 12,
        "title": "Sunset Canvas",
        "image_url": "https://img.example.com/p1-11.jpg",
        "price": 12.5,
    }
    assert catalog_service.resolve_line("p1", "12")["variant_id"] == 12


def test_resolve_line_rejects_disabled_variant_and_unknown_product():
    with pytest.raises(CatalogNotFound):
        catalog_service.resolve_line("p1", 11)
    with pytest.raises(CatalogNotFound) as exc_info:
        catalog_service.resolve_line("ghost")
    assert exc_info.value.message == "Product not found: ghost"
