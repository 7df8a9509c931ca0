# src/api/endpoints.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from api import models
from api.client import ApiClient
from api.errors import ApiError

T = TypeVar("T")


def _collection(body: Any, key: str) -> list:
    """
    Pull the list out of the {data: {<key>: [...]}} envelope.
    A bare list is accepted as well; anything else is an unexpected shape.
    """
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, dict) and isinstance(data.get(key), list):
            return data[key]
        if isinstance(data, list):
            return data
    raise ApiError(f"Unexpected response shape for {key}.")


def _parse_all(rows: list, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
    try:
        return [parse(row) for row in rows]
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise ApiError(f"Malformed item in response: {e}") from e


def _parse_auth(body: Any) -> models.AuthResult:
    try:
        return models.AuthResult(
            token=str(body["token"]),
            user=models.UserIdentity.from_json(body["data"]),
        )
    except (KeyError, TypeError) as e:
        raise ApiError("Unexpected response from the authentication server.") from e


# ---------------------------
# Auth & Registration
# ---------------------------


async def login(client: ApiClient, email: str, password: str) -> models.AuthResult:
    body = await client.post("/auth/login", {"email": email, "password": password})
    return _parse_auth(body)


async def register(
    client: ApiClient, name: str, email: str, password: str
) -> models.AuthResult:
    body = await client.post(
        "/auth/register", {"name": name, "email": email, "password": password}
    )
    return _parse_auth(body)


# ---------------------------
# Products & Categories
# ---------------------------


async def list_products(
    client: ApiClient, limit: int = 100, category: Optional[str] = None
) -> List[models.Product]:
    """GET /products; category is passed through for server side filtering."""
    params: Dict[str, Any] = {"limit": str(limit)}
    if category:
        params["category"] = category
    body = await client.get("/products", params)
    return _parse_all(_collection(body, "products"), models.Product.from_json)


async def update_product(
    client: ApiClient,
    product_id: str,
    price: Optional[float] = None,
    stock: Optional[int] = None,
) -> None:
    """Only the provided fields are sent."""
    payload: Dict[str, Any] = {}
    if price is not None:
        payload["price"] = price
    if stock is not None:
        payload["stock"] = stock
    if not payload:
        return
    await client.put(f"/products/{product_id}", payload)


async def delete_product(client: ApiClient, product_id: str) -> None:
    await client.delete(f"/products/{product_id}")


async def list_categories(client: ApiClient) -> List[models.Category]:
    body = await client.get("/categories")
    return _parse_all(_collection(body, "categories"), models.Category.from_json)


async def create_category(
    client: ApiClient, name: str, description: str = ""
) -> None:
    await client.post("/categories", {"name": name, "description": description})


async def delete_category(client: ApiClient, category_id: str) -> None:
    await client.delete(f"/categories/{category_id}")


# ---------------------------
# Orders
# ---------------------------


async def create_order(client: ApiClient, payload: Dict[str, Any]) -> Optional[models.Order]:
    """
    POST /orders. Returns the created order when the server echoes it back,
    None when it only acknowledges.
    """
    body = await client.post("/orders", payload)
    data = body.get("data") if isinstance(body, dict) else None
    if isinstance(data, dict) and isinstance(data.get("order"), dict):
        data = data["order"]
    if isinstance(data, dict) and "_id" in data:
        try:
            return models.Order.from_json(data)
        except (KeyError, ValueError, TypeError):
            return None
    return None


async def my_orders(client: ApiClient) -> List[models.Order]:
    body = await client.get("/orders/my")
    return _parse_all(_collection(body, "orders"), models.Order.from_json)


# ---------------------------
# Admin
# ---------------------------


async def admin_list_orders(client: ApiClient) -> List[models.Order]:
    body = await client.get("/admin/orders")
    return _parse_all(_collection(body, "orders"), models.Order.from_json)


async def admin_update_order_status(
    client: ApiClient, order_id: str, status: str
) -> None:
    await client.put(f"/admin/orders/{order_id}/status", {"status": status})


async def admin_delete_order(client: ApiClient, order_id: str) -> None:
    await client.delete(f"/admin/orders/{order_id}")


async def admin_list_users(client: ApiClient) -> List[models.UserAccount]:
    body = await client.get("/admin/users")
    return _parse_all(_collection(body, "users"), models.UserAccount.from_json)


async def admin_update_user_role(client: ApiClient, user_id: str, role: str) -> None:
    await client.put(f"/admin/users/{user_id}/role", {"role": role})


async def admin_delete_user(client: ApiClient, user_id: str) -> None:
    await client.delete(f"/admin/users/{user_id}")
