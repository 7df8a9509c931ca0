from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import (
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from api import endpoints
from api.client import ApiClient
from api.models import Category, Order, OrderStatus, Product, UserAccount
from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

ALL = "all"

Confirm = Callable[[], Awaitable[bool]]


class AdminCollection(Generic[T]):
    """
    A collection fetched in full from the API and filtered locally.

    Writes are never applied locally first: the write call goes out, then
    the whole collection is fetched again. `selected` is the item shown in the
    detail view. Any failure propagates and leaves `items` as it was.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.items: List[T] = []
        self.selected: Optional[T] = None
        self.loaded = False

    # subclasses fill these in
    async def _fetch(self) -> List[T]:
        raise NotImplementedError

    def _matches(self, item: T, needle: str) -> bool:
        raise NotImplementedError

    def _status_of(self, item: T) -> str:
        return ALL

    @staticmethod
    def key(item) -> str:
        return item.id

    async def refresh(self) -> List[T]:
        items = await self._fetch()
        self.items = items
        self.loaded = True
        return items

    def find(self, item_id: str) -> Optional[T]:
        for item in self.items:
            if self.key(item) == item_id:
                return item
        return None

    def select(self, item_id: Optional[str]) -> Optional[T]:
        self.selected = self.find(item_id) if item_id else None
        return self.selected

    def filter(self, query: str = "", status: str = ALL) -> List[T]:
        needle = (query or "").strip().lower()
        wanted = (status or ALL).lower()
        return [
            item
            for item in self.items
            if (wanted == ALL or self._status_of(item).lower() == wanted)
            and (not needle or self._matches(item, needle))
        ]

    async def _write_then_refresh(
        self, item_id: str, call: Awaitable[None], patch: Optional[Dict] = None
    ) -> None:
        await call
        await self.refresh()
        if self.selected is not None and self.key(self.selected) == item_id:
            current = self.find(item_id) or self.selected
            self.selected = replace(current, **patch) if patch else current

    async def delete(self, item_id: str, confirm: Confirm) -> bool:
        """
        confirm is awaited first; a False answer cancels without any call.
        Returns True when the item was deleted.
        """
        if not await confirm():
            return False
        await self._delete(item_id)
        _logger.info(f"{type(self).__name__}: deleted {item_id}.")
        if self.selected is not None and self.key(self.selected) == item_id:
            self.selected = None
        await self.refresh()
        return True

    async def _delete(self, item_id: str) -> None:
        raise NotImplementedError


# ---------------------------
# Orders
# ---------------------------


class OrderDesk(AdminCollection[Order]):
    async def _fetch(self) -> List[Order]:
        return await endpoints.admin_list_orders(self.client)

    def _matches(self, order: Order, needle: str) -> bool:
        return (
            needle in order.id.lower()
            or needle in order.email.lower()
            or needle in order.customer_name.lower()
        )

    def _status_of(self, order: Order) -> str:
        return order.status

    async def update_status(self, order_id: str, status: str) -> None:
        status = OrderStatus(status.lower()).value
        await self._write_then_refresh(
            order_id,
            endpoints.admin_update_order_status(self.client, order_id, status),
            patch={"status": status},
        )
        _logger.info(f"Order {order_id} -> {status}.")

    async def _delete(self, order_id: str) -> None:
        await endpoints.admin_delete_order(self.client, order_id)


# ---------------------------
# Products
# ---------------------------

IN_STOCK = "in-stock"
OUT_OF_STOCK = "out-of-stock"


class ProductDesk(AdminCollection[Product]):
    def __init__(self, client: ApiClient, limit: int = 100) -> None:
        super().__init__(client)
        self.limit = limit

    async def _fetch(self) -> List[Product]:
        return await endpoints.list_products(self.client, limit=self.limit)

    def _matches(self, product: Product, needle: str) -> bool:
        return (
            needle in product.name.lower()
            or needle in product.description.lower()
            or needle in product.category_name.lower()
        )

    def _status_of(self, product: Product) -> str:
        return IN_STOCK if product.in_stock else OUT_OF_STOCK

    async def update_price_stock(
        self,
        product_id: str,
        price: Optional[Decimal] = None,
        stock: Optional[int] = None,
    ) -> bool:
        """Only changed fields are sent; returns False when there is nothing to send."""
        current = self.find(product_id)
        if current is not None:
            if price is not None and price == current.price:
                price = None
            if stock is not None and stock == current.stock:
                stock = None
        if price is None and stock is None:
            return False
        if price is not None and price < 0:
            raise ValueError("Price cannot be negative.")
        if stock is not None and stock < 0:
            raise ValueError("Stock cannot be negative.")

        patch = {}
        if price is not None:
            patch["price"] = price
        if stock is not None:
            patch["stock"] = stock
        await self._write_then_refresh(
            product_id,
            endpoints.update_product(
                self.client,
                product_id,
                price=float(price) if price is not None else None,
                stock=stock,
            ),
            patch=patch,
        )
        return True

    async def _delete(self, product_id: str) -> None:
        await endpoints.delete_product(self.client, product_id)


# ---------------------------
# Categories
# ---------------------------


class CategoryDesk(AdminCollection[Category]):
    async def _fetch(self) -> List[Category]:
        return await endpoints.list_categories(self.client)

    def _matches(self, category: Category, needle: str) -> bool:
        return needle in category.name.lower() or needle in category.description.lower()

    async def create(self, name: str, description: str = "") -> None:
        name = name.strip()
        if not name:
            raise ValueError("Category name is required.")
        await endpoints.create_category(self.client, name, description.strip())
        await self.refresh()

    async def _delete(self, category_id: str) -> None:
        await endpoints.delete_category(self.client, category_id)


# ---------------------------
# Users
# ---------------------------

ROLES = ("User", "Admin")


class UserDesk(AdminCollection[UserAccount]):
    async def _fetch(self) -> List[UserAccount]:
        return await endpoints.admin_list_users(self.client)

    def _matches(self, user: UserAccount, needle: str) -> bool:
        return (
            needle in user.name.lower()
            or needle in user.email.lower()
            or needle in user.id.lower()
        )

    def _status_of(self, user: UserAccount) -> str:
        return user.role

    async def set_role(self, user_id: str, role: str) -> None:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        await self._write_then_refresh(
            user_id,
            endpoints.admin_update_user_role(self.client, user_id, role),
            patch={"role": role},
        )

    async def _delete(self, user_id: str) -> None:
        await endpoints.admin_delete_user(self.client, user_id)


# ---------------------------
# Overview
# ---------------------------


@dataclass(frozen=True)
class OrderSummary:
    order_count: int
    by_status: Dict[str, int]
    revenue: Decimal
    distinct_customers: int
    items_sold: int


def summarize_orders(orders: Sequence[Order]) -> OrderSummary:
    """Revenue and items sold leave cancelled orders out."""
    by_status: Dict[str, int] = {s: 0 for s in (st.value for st in OrderStatus)}
    customers = set()
    revenue = Decimal("0")
    items_sold = 0
    for order in orders:
        by_status[order.status] = by_status.get(order.status, 0) + 1
        customers.add(order.user.id if order.user else order.email.lower())
        if order.status != OrderStatus.CANCELLED.value:
            revenue += order.total
            items_sold += order.item_count
    return OrderSummary(
        order_count=len(orders),
        by_status=by_status,
        revenue=revenue,
        distinct_customers=len(customers),
        items_sold=items_sold,
    )
