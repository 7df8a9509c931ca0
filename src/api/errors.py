from typing import Dict, Optional


class ShopError(Exception):
    """Base class for every error the storefront raises on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ApiError(ShopError):
    """
    The API could not be reached, answered with a non 2xx status,
    or sent something that is not JSON. status is None for transport errors.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class AuthRequiredError(ShopError):
    """
    An action needs a logged in user.
    The UI shows message, then opens redirect_to after redirect_delay seconds.
    """

    def __init__(
        self,
        message: str = "You must log in to add a product to the cart.",
        redirect_to: str = "login",
        redirect_delay: float = 1.5,
    ):
        super().__init__(message)
        self.redirect_to = redirect_to
        self.redirect_delay = redirect_delay


class ValidationError(ShopError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class EmptyCartError(ShopError):
    def __init__(self, message: str = "No items in cart."):
        super().__init__(message)


class CheckoutBusyError(ShopError):
    def __init__(self, message: str = "An order is already being submitted."):
        super().__init__(message)


class OutOfStockError(ShopError):
    pass
