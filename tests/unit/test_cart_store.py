import json

from printstream.cart.store import CartStore, STORAGE_KEY

CANVAS = {"id": "p1", "title": "Sunset Canvas", "price": 12.5, "image_url": "https://img.example.com/p1.jpg"}
POSTER = {"id": "p2", "title": "Forest", "price": 20}


def test_adding_same_line_merges_quantities():
    cart = CartStore()
    cart.add(CANVAS, 1)
    cart.add(CANVAS, 2)
    assert len(cart.items) == 1
    assert cart.items[0]["quantity"] == 3
    assert cart.items[0]["imageUrl"] == "https://img.example.com/p1.jpg"


def test_variants_are_distinct_lines():
    cart = CartStore()
    cart.add(CANVAS, 1, variant_id=12)
    cart.add(CANVAS, 1, variant_id=13)
    cart.add(CANVAS, 1)
    assert len(cart.items) == 3
    assert cart.is_in_cart("p1")
    assert not cart.is_in_cart("p2")


def test_totals():
    cart = CartStore()
    cart.add(CANVAS, 2)
    cart.add(POSTER, 1)
    assert cart.total_items == 3
    assert cart.total_price == 45.0
    assert cart.cart_total == 45.0


def test_update_quantity_to_zero_removes_line():
    cart = CartStore()
    cart.add(CANVAS, 2, variant_id=12)
    cart.update_quantity("p1", 12, 5)
    assert cart.items[0]["quantity"] == 5
    cart.update_quantity("p1", 12, 0)
    assert cart.items == []


def test_remove_and_clear():
    cart = CartStore()
    cart.add(CANVAS)
    cart.add(POSTER)
    cart.remove("p1")
    assert [i["id"] for i in cart.items] == ["p2"]
    cart.clear()
    assert cart.total_items == 0


def test_order_items_never_carry_prices():
    cart = CartStore()
    cart.add(CANVAS, 2, variant_id=12)
    assert cart.to_order_items() == [{"productId": "p1", "quantity": 2, "variantId": 12}]


def test_cart_persists_and_restores():
    storage = {}
    cart = CartStore(storage)
    cart.add(CANVAS, 2)
    assert json.loads(storage[STORAGE_KEY])[0]["quantity"] == 2

    restored = CartStore(storage)
    assert restored.total_items == 2
    assert restored.total_price == 25.0


def test_corrupt_storage_starts_empty():
    cart = CartStore({STORAGE_KEY: "{not json"})
    assert cart.items == []


def test_malformed_items_are_skipped_on_restore():
    saved = '[{"id": "p1", "quantity": "abc", "price": 1}, {"id": "p2", "quantity": 0, "price": 3}, {"id": "p3", "quantity": 2, "price": 4.5}]'
    cart = CartStore({STORAGE_KEY: saved})
    assert [(i["id"], i["quantity"]) for i in cart.items] == [("p3", 2)]
    assert cart.total_price == 9.0


def test_listeners_are_notified_until_unsubscribed():
    cart = CartStore()
    seen = []
    unsubscribe = cart.subscribe(lambda c: seen.append(c.total_items))
    cart.add(CANVAS)
    unsubscribe()
    cart.add(CANVAS)
    assert seen == [1]
