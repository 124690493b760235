"""
Cart Store: panier côté client, objet explicite construit une fois et passé par référence.

- Lignes indexées par (product_id, variant_id); quantités fusionnées à l'ajout.
- Persistance JSON sous la clé "cart" dans un MutableMapping[str, str] (local storage).
- Aucune autorité serveur: to_order_items() n'envoie jamais de prix.
"""
import json
import logging
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Tuple

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart"

CartKey = Tuple[str, Optional[str]]


def _key(product_id: Any, variant_id: Any = None) -> CartKey:
    return (str(product_id), None if variant_id in (None, "") else str(variant_id))


class CartStore:
    def __init__(self, storage: Optional[MutableMapping[str, str]] = None):
        self._storage = storage if storage is not None else {}
        self._items: Dict[CartKey, Dict[str, Any]] = {}
        self._listeners: List[Callable[["CartStore"], None]] = []
        self._restore()

    # --- Lecture ---

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [dict(item) for item in self._items.values()]

    @property
    def total_items(self) -> int:
        return sum(int(item["quantity"]) for item in self._items.values())

    @property
    def total_price(self) -> float:
        return round(sum(float(item["price"]) * int(item["quantity"]) for item in self._items.values()), 2)

    @property
    def cart_total(self) -> float:
        return self.total_price

    def is_in_cart(self, product_id: Any) -> bool:
        return any(pid == str(product_id) for pid, _ in self._items)

    def to_order_items(self) -> List[Dict[str, Any]]:
        """Lignes pour POST /api/orders: {productId, quantity, variantId}."""
        return [
            {"productId": item["id"], "quantity": int(item["quantity"]), "variantId": item.get("variantId")}
            for item in self._items.values()
        ]

    # --- Mutations ---

    def add(self, product: Dict[str, Any], quantity: int = 1, variant_id: Any = None) -> None:
        key = _key(product.get("id"), variant_id)
        existing = self._items.get(key)
        if existing:
            existing["quantity"] = int(existing["quantity"]) + int(quantity)
        else:
            self._items[key] = {
                "id": key[0],
                "title": product.get("title") or "",
                "price": float(product.get("price") or 0),
                "imageUrl": product.get("imageUrl") or product.get("image_url") or "",
                "quantity": int(quantity),
                "variantId": variant_id,
            }
        self._commit()

    def update_quantity(self, product_id: Any, variant_id: Any, quantity: int) -> None:
        key = _key(product_id, variant_id)
        if quantity <= 0:
            self._items.pop(key, None)
        elif key in self._items:
            self._items[key]["quantity"] = int(quantity)
        self._commit()

    def remove(self, product_id: Any, variant_id: Any = None) -> None:
        self._items.pop(_key(product_id, variant_id), None)
        self._commit()

    def clear(self) -> None:
        self._items.clear()
        self._commit()

    def subscribe(self, listener: Callable[["CartStore"], None]) -> Callable[[], None]:
        """Enregistre un listener appelé après chaque mutation; retourne la fonction de désinscription."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # --- Persistance ---

    def _commit(self) -> None:
        self._storage[STORAGE_KEY] = json.dumps(self.items)
        for listener in list(self._listeners):
            listener(self)

    def _restore(self) -> None:
        raw = self._storage.get(STORAGE_KEY)
        if not raw:
            return
        try:
            saved = json.loads(raw)
        except ValueError:
            logger.warning("cart.store payload unreadable, starting empty")
            return
        if not isinstance(saved, list):
            return
        for item in saved:
            if not isinstance(item, dict) or item.get("id") is None:
                continue
            try:
                price = float(item.get("price") or 0)
                quantity = int(item.get("quantity", 1))
            except (TypeError, ValueError):
                logger.warning("cart.store skipping malformed item id=%s", item.get("id"))
                continue
            if quantity < 1:
                continue
            self._items[_key(item["id"], item.get("variantId"))] = {
                "id": str(item["id"]),
                "title": item.get("title") or "",
                "price": price,
                "imageUrl": item.get("imageUrl") or "",
                "quantity": quantity,
                "variantId": item.get("variantId"),
            }
