from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from api.errors import CheckoutBusyError, EmptyCartError, ValidationError
from api.models import PAYMENT_COD, Order, ShippingAddress
from store.cart import Cart
from utils.logger import get_logger

_logger = get_logger(__name__)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

SUBMIT_FAILED_MSG = "Failed to submit order. Please try again."


@dataclass
class CheckoutForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

    def shipping_address(self) -> ShippingAddress:
        return ShippingAddress(
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
            address=self.address.strip(),
            city=self.city.strip(),
            state=self.state.strip(),
            zip_code=self.zip_code.strip(),
        )


FIELD_LABELS: Dict[str, str] = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip_code": "Zip code",
}


def validate(form: CheckoutForm) -> Dict[str, str]:
    """Return {field: message} for every problem, empty when the form is fine."""
    errors: Dict[str, str] = {}
    for f in fields(form):
        if not getattr(form, f.name).strip():
            errors[f.name] = f"{FIELD_LABELS[f.name]} is required"
    if "email" not in errors and not EMAIL_RE.search(form.email):
        errors["email"] = "Email is invalid"
    return errors


def build_order_payload(cart: Cart, form: CheckoutForm) -> Dict[str, Any]:
    subtotal = cart.subtotal()
    tax = cart.tax()
    return {
        "items": [item.to_json() for item in cart.to_order_items()],
        "shippingAddress": form.shipping_address().to_json(),
        "email": form.email.strip(),
        "phone": form.phone.strip(),
        "paymentMethod": PAYMENT_COD,
        "subtotal": float(subtotal),
        "tax": float(tax),
        "total": float(subtotal + tax),
    }


class CheckoutState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


SubmitFn = Callable[[Dict[str, Any]], Awaitable[Optional[Order]]]


class CheckoutFlow:
    """
    Editing -> Validating -> Submitting -> Succeeded | Failed

    submit_order performs the single POST /orders call. A submit while another
    one is in flight raises CheckoutBusyError. The cart is only cleared on
    success.
    """

    next_view = "orders"

    def __init__(self, cart: Cart, submit_order: SubmitFn) -> None:
        self.cart = cart
        self._submit_order = submit_order
        self.state = CheckoutState.EDITING
        self.errors: Dict[str, str] = {}
        self.error: Optional[str] = None
        self.order: Optional[Order] = None

    @property
    def is_empty(self) -> bool:
        return self.cart.is_empty

    @property
    def in_flight(self) -> bool:
        return self.state in (CheckoutState.VALIDATING, CheckoutState.SUBMITTING)

    async def submit(self, form: CheckoutForm) -> Optional[Order]:
        """
        Raises ValidationError (back to EDITING, no call made), ApiError (FAILED,
        cart untouched), EmptyCartError or CheckoutBusyError.
        Returns the created order when the server sent it back.
        """
        if self.in_flight:
            raise CheckoutBusyError()
        if self.cart.is_empty:
            raise EmptyCartError()

        self.state = CheckoutState.VALIDATING
        self.error = None
        self.errors = validate(form)
        if self.errors:
            self.state = CheckoutState.EDITING
            raise ValidationError(self.errors)

        self.state = CheckoutState.SUBMITTING
        payload = build_order_payload(self.cart, form)
        try:
            order = await self._submit_order(payload)
        except asyncio.CancelledError:
            # the server may already have the order, so this flow stays busy
            _logger.warning("Order submission cancelled, outcome unknown.")
            raise
        except Exception as e:
            self.state = CheckoutState.FAILED
            self.error = SUBMIT_FAILED_MSG
            _logger.warning(f"Order submission failed: {e!r}")
            raise

        self.order = order
        self.cart.clear()
        self.state = CheckoutState.SUCCEEDED
        order_ref = f" #{order.id}" if order else ""
        _logger.info(f"Order placed{order_ref}, total {payload['total']:.2f}.")
        return order
