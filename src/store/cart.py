from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, List, Optional

from api.errors import AuthRequiredError, OutOfStockError
from api.models import OrderItem, Product

TAX_RATE = Decimal("0.08")


@dataclass(frozen=True)
class CartLine:
    line_id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    image: str
    stock: int = 0  # 0 means unknown, no cap

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """
    Session local cart. Totals are computed from the lines on every call and
    never stored.

    merge_lines=True: the line id is the product id and repeated adds bump
    the quantity. merge_lines=False: every add is its own line with a random id.

    Subscribers are called synchronously after every change.
    """

    def __init__(self, merge_lines: bool = True) -> None:
        self.merge_lines = merge_lines
        self._lines: List[CartLine] = []
        self._listeners: List[Callable[[Cart], None]] = []

    # ---------------------------
    # observers
    # ---------------------------

    def subscribe(self, callback: Callable[[Cart], None]) -> Callable[[], None]:
        """Returns a function that removes the subscription."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    # ---------------------------
    # reads
    # ---------------------------

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_line(self, line_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.line_id == line_id:
                return line
        return None

    def _index(self, line_id: str) -> int:
        for i, line in enumerate(self._lines):
            if line.line_id == line_id:
                return i
        raise KeyError(line_id)

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def tax(self) -> Decimal:
        return self.subtotal() * TAX_RATE

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()

    def to_order_items(self) -> List[OrderItem]:
        return [
            OrderItem(
                product_id=line.product_id,
                name=line.name,
                price=line.unit_price,
                quantity=line.quantity,
                image=line.image,
            )
            for line in self._lines
        ]

    # ---------------------------
    # writes
    # ---------------------------

    def add_line(self, product: Product, quantity: int = 1, *, session) -> CartLine:
        """
        Add quantity units of product and return the resulting line.

        session: anything with is_authenticated; a missing or anonymous session
        is rejected with AuthRequiredError and the cart is left as is.
        """
        if session is None or not session.is_authenticated:
            raise AuthRequiredError()
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")
        if not product.in_stock:
            raise OutOfStockError(f"{product.name} is out of stock.")

        # products without an id get a line of their own
        if self.merge_lines and product.id:
            existing = self.get_line(product.id)
            if existing is not None:
                line = replace(
                    existing, quantity=self._cap(existing.quantity + quantity, product.stock)
                )
                self._lines[self._index(existing.line_id)] = line
                self._changed()
                return line
            line_id = product.id
        else:
            line_id = uuid.uuid4().hex

        line = CartLine(
            line_id=line_id,
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=self._cap(quantity, product.stock),
            image=product.image,
            stock=product.stock,
        )
        self._lines.append(line)
        self._changed()
        return line

    def set_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """quantity <= 0 removes the line and returns None."""
        idx = self._index(line_id)
        if quantity <= 0:
            del self._lines[idx]
            self._changed()
            return None
        line = self._lines[idx]
        line = replace(line, quantity=self._cap(quantity, line.stock))
        self._lines[idx] = line
        self._changed()
        return line

    def decrement(self, line_id: str) -> Optional[CartLine]:
        """Take one unit off; the last unit takes the line with it."""
        line = self._lines[self._index(line_id)]
        return self.set_quantity(line_id, line.quantity - 1)

    def remove_line(self, line_id: str) -> None:
        del self._lines[self._index(line_id)]
        self._changed()

    def clear(self) -> None:
        if not self._lines:
            return
        self._lines.clear()
        self._changed()

    @staticmethod
    def _cap(quantity: int, stock: int) -> int:
        return min(quantity, stock) if stock > 0 else quantity
