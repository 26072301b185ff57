# src/api/client.py
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

import httpx

from api import models
from api.models import Id
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

MALFORMED_RESPONSE = "Malformed response from server."


class ApiError(Exception):
    """
    A failed call to the marketplace API.
    status is the HTTP status code, or None when the server was never reached.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _list_of(data: Any) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise TypeError(f"expected a JSON array, got {type(data).__name__}")
    return data


class AgriHubClient:
    """
    Async wrapper over the marketplace REST API.

    Calls that need an identity take the bearer token explicitly; the client
    itself holds no session.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "AgriHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        default_error: str,
        token: Optional[str] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        **kwargs,
    ) -> Any:
        """
        Send one request and return the decoded body, passed through parse when
        given. Every failure, including a body of the wrong shape, is an ApiError.
        """
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            resp = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            _logger.error(f"{method} {path} failed: {e!r}")
            raise ApiError(default_error) from e

        _logger.debug(f"{method} {path} -> {resp.status_code}")

        if resp.is_error:
            message = default_error
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("message"):
                    message = str(body["message"])
            except ValueError:
                pass
            _logger.warning(f"{method} {path} -> {resp.status_code}: {message}")
            raise ApiError(message, resp.status_code)

        if resp.status_code == 204 or not resp.content:
            data = None
        else:
            try:
                data = resp.json()
            except ValueError as e:
                raise ApiError(MALFORMED_RESPONSE, resp.status_code) from e

        if parse is None:
            return data
        try:
            return parse(data)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            _logger.warning(f"{method} {path}: unexpected response shape: {e!r}")
            raise ApiError(MALFORMED_RESPONSE, resp.status_code) from e

    # ---------------------------
    # Auth
    # ---------------------------

    async def register(self, username: str, email: str, password: str) -> dict:
        """Create an account; returns the session payload {id, username, email, role, token}."""
        return await self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
            default_error="Authentication failed",
        )

    async def login(self, email: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            default_error="Authentication failed",
        )

    # ---------------------------
    # Catalog
    # ---------------------------

    async def list_categories(self) -> List[models.Category]:
        return await self._request(
            "GET",
            "/categories",
            parse=lambda data: [models.Category.from_json(c) for c in _list_of(data)],
            default_error="Failed to load categories.",
        )

    async def list_products(
        self, category: Optional[Id] = None, token: Optional[str] = None
    ) -> List[models.Product]:
        params = {"category": category} if category not in (None, "") else None
        return await self._request(
            "GET",
            "/products",
            params=params,
            token=token,
            parse=lambda data: [models.Product.from_json(p) for p in _list_of(data)],
            default_error="Failed to load products.",
        )

    async def get_product(self, product_id: Id) -> models.Product:
        return await self._request(
            "GET",
            f"/products/{product_id}",
            parse=models.Product.from_json,
            default_error="Product not found or failed to fetch.",
        )

    async def create_product(self, token: str, draft: models.ProductDraft) -> Any:
        return await self._request(
            "POST",
            "/products",
            token=token,
            json=draft.to_json(),
            default_error="Failed to save product.",
        )

    async def update_product(
        self, token: str, product_id: Id, draft: models.ProductDraft
    ) -> Any:
        return await self._request(
            "PUT",
            f"/products/{product_id}",
            token=token,
            json=draft.to_json(),
            default_error="Failed to save product.",
        )

    async def delete_product(self, token: str, product_id: Id) -> None:
        await self._request(
            "DELETE",
            f"/products/{product_id}",
            token=token,
            default_error="Failed to delete product.",
        )

    # ---------------------------
    # Orders
    # ---------------------------

    async def place_order(
        self,
        token: str,
        items: Iterable[Any],
        shipping_address: str,
        payment_method: str,
    ) -> Optional[Id]:
        """
        Place an order for the given cart line items (anything with .id and
        .quantity). Returns the new order id reported by the server, or None
        when the order went through but the reply carries no id.
        """
        payload = {
            "orderItems": [
                {"productId": item.id, "quantity": item.quantity} for item in items
            ],
            "shippingAddress": shipping_address,
            "paymentMethod": payment_method,
        }
        return await self._request(
            "POST",
            "/orders",
            token=token,
            json=payload,
            parse=lambda data: data.get("orderId") if isinstance(data, dict) else None,
            default_error="Failed to place order.",
        )

    async def my_orders(self, token: str) -> List[models.Order]:
        return await self._request(
            "GET",
            "/orders/myorders",
            token=token,
            parse=lambda data: [models.Order.from_json(o) for o in _list_of(data)],
            default_error="Failed to fetch orders",
        )

    async def all_orders(self, token: str) -> List[models.Order]:
        return await self._request(
            "GET",
            "/orders",
            token=token,
            parse=lambda data: [models.Order.from_json(o) for o in _list_of(data)],
            default_error="Failed to fetch orders",
        )

    async def update_order_status(self, token: str, order_id: Id, status: str) -> Any:
        return await self._request(
            "PUT",
            f"/orders/{order_id}/status",
            token=token,
            json={"status": status},
            default_error="Failed to update status",
        )
