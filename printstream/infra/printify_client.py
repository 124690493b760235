"""
Adaptateur HTTP Printify (catalogue + fulfillment).

- Authentification Bearer (PRINTIFY_API_KEY), JSON, timeout PRINTIFY_TIMEOUT.
- Les erreurs amont sont converties en FulfillmentError avec le message renvoyé
  par Printify (champ message/error) quand il existe.
- Un 404 amont lève CatalogNotFound.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from printstream.config import PRINTIFY_API_URL, PRINTIFY_API_KEY, PRINTIFY_TIMEOUT

logger = logging.getLogger(__name__)


class FulfillmentError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CatalogNotFound(FulfillmentError):
    pass


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {PRINTIFY_API_KEY}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"Printify status {resp.status_code}"
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error")
        if isinstance(msg, dict):
            msg = msg.get("reason") or msg.get("message")
        if msg:
            return str(msg)
    return f"Printify status {resp.status_code}"


def _request(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{PRINTIFY_API_URL}{path}"
    try:
        resp = httpx.request(method, url, headers=_headers(), json=payload, timeout=PRINTIFY_TIMEOUT)
    except httpx.HTTPError as e:
        logger.error("printify request failed method=%s path=%s error=%s", method, path, e)
        raise FulfillmentError(str(e) or e.__class__.__name__) from e

    if resp.status_code == 404:
        raise CatalogNotFound(_error_message(resp), status_code=404)
    if resp.status_code >= 400:
        message = _error_message(resp)
        logger.error("printify error method=%s path=%s status=%s message=%s", method, path, resp.status_code, message)
        raise FulfillmentError(message, status_code=resp.status_code)
    if not resp.content:
        return {}
    return resp.json()


def list_products(shop_id: str) -> Any:
    return _request("GET", f"/shops/{shop_id}/products.json")


def get_product(shop_id: str, product_id: str) -> Dict[str, Any]:
    return _request("GET", f"/shops/{shop_id}/products/{product_id}.json")


def create_order(shop_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return _request("POST", f"/shops/{shop_id}/orders.json", payload)


def get_order(shop_id: str, order_id: str) -> Dict[str, Any]:
    return _request("GET", f"/shops/{shop_id}/orders/{order_id}.json")
