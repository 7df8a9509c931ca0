# provide dataclass models, normalized from the API's JSON once at fetch time

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Tuple

PAYMENT_COD = "CASH_ON_DELIVERY"
PLACEHOLDER_IMAGE = "/placeholder.jpg"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# statuses an admin can pick from, in lifecycle order
ADMIN_STATUSES: Tuple[str, ...] = tuple(s.value for s in OrderStatus)


def slugify(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^\w-]+", "", slug)


def to_decimal(val: Any) -> Decimal:
    if isinstance(val, bool) or val is None:
        raise ValueError(f"Not a number: {val!r}")
    try:
        return Decimal(str(val))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {val!r}") from e


def parse_ts(val: Any) -> Optional[datetime]:
    if not val or not isinstance(val, str):
        return None
    try:
        return datetime.fromisoformat(val.replace("Z", "+00:00"))
    except ValueError:
        return None


def _ref_id(val: Any) -> str:
    """Mongo style references come either populated ({_id: ...}) or as a bare id."""
    if isinstance(val, dict):
        return str(val.get("_id", ""))
    return "" if val is None else str(val)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    description: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=str(data.get("_id", "")),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: Decimal
    category: Category | str
    images: Tuple[str, ...] = ()
    stock: int = 0
    slug: str = ""

    @property
    def category_name(self) -> str:
        if isinstance(self.category, Category):
            return self.category.name
        return self.category or ""

    @property
    def image(self) -> str:
        return self.images[0] if self.images else PLACEHOLDER_IMAGE

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Product":
        """
        Raises KeyError/ValueError/TypeError when the payload is not a product,
        callers treat that as an unexpected response shape.
        """
        product_id = data.get("_id") or data.get("id")
        if not product_id:
            raise KeyError("_id")
        name = str(data["name"])
        price = to_decimal(data["price"])
        if price < 0:
            raise ValueError(f"Negative price for {name!r}")

        raw_cat = data.get("category")
        if isinstance(raw_cat, dict):
            category: Category | str = Category.from_json(raw_cat)
        else:
            category = str(raw_cat or "")

        return cls(
            id=str(product_id),
            name=name,
            description=str(data.get("description") or ""),
            price=price,
            category=category,
            images=tuple(str(i) for i in data.get("images") or ()),
            stock=max(int(data.get("stock") or 0), 0),
            slug=data.get("slug") or slugify(name),
        )


@dataclass(frozen=True)
class UserIdentity:
    id: str
    name: str
    email: str
    role: str = "User"

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UserIdentity":
        return cls(
            id=str(data["_id"]),
            name=str(data["name"]),
            email=str(data["email"]),
            role=data.get("role") or "User",
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "isAdmin": self.is_admin,
        }


@dataclass(frozen=True)
class UserAccount:
    id: str
    name: str
    email: str
    role: str = "User"
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UserAccount":
        return cls(
            id=str(data["_id"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=data.get("role") or "User",
            created_at=parse_ts(data.get("createdAt")),
        )


@dataclass(frozen=True)
class ShippingAddress:
    first_name: str
    last_name: str
    address: str
    city: str
    state: str
    zip_code: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def one_line(self) -> str:
        return f"{self.address}, {self.city}, {self.state} {self.zip_code}"

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ShippingAddress":
        return cls(
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            address=str(data.get("address") or ""),
            city=str(data.get("city") or ""),
            state=str(data.get("state") or ""),
            zip_code=str(data.get("zipCode") or ""),
        )

    def to_json(self) -> Dict[str, str]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
        }


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image: str = PLACEHOLDER_IMAGE

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "OrderItem":
        return cls(
            product_id=_ref_id(data.get("productId")),
            name=str(data.get("name") or ""),
            price=to_decimal(data.get("price", 0)),
            quantity=int(data.get("quantity") or 0),
            image=str(data.get("image") or PLACEHOLDER_IMAGE),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "image": self.image,
        }


@dataclass(frozen=True)
class OrderUser:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Order:
    id: str
    items: Tuple[OrderItem, ...]
    shipping_address: ShippingAddress
    email: str
    phone: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: str
    payment_method: str = PAYMENT_COD
    user: Optional[OrderUser] = None
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def customer_name(self) -> str:
        if self.user and self.user.name:
            return self.user.name
        return self.shipping_address.full_name

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Order":
        raw_user = data.get("user")
        user = None
        if isinstance(raw_user, dict):
            user = OrderUser(
                id=str(raw_user.get("_id", "")),
                name=str(raw_user.get("name") or ""),
                email=str(raw_user.get("email") or ""),
            )
        elif raw_user:
            user = OrderUser(id=str(raw_user), name="", email="")

        return cls(
            id=str(data["_id"]),
            items=tuple(OrderItem.from_json(i) for i in data.get("items") or ()),
            shipping_address=ShippingAddress.from_json(
                data.get("shippingAddress") or {}
            ),
            email=str(data.get("email") or ""),
            phone=str(data.get("phone") or ""),
            subtotal=to_decimal(data.get("subtotal", 0)),
            tax=to_decimal(data.get("tax", 0)),
            total=to_decimal(data.get("total", 0)),
            status=str(data.get("status") or OrderStatus.PENDING.value).lower(),
            payment_method=str(data.get("paymentMethod") or PAYMENT_COD),
            user=user,
            notes=str(data.get("notes") or ""),
            created_at=parse_ts(data.get("createdAt")),
            updated_at=parse_ts(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: UserIdentity
