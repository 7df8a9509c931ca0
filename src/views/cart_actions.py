from textual.app import App
from textual.dom import DOMNode

from api.errors import AuthRequiredError, OutOfStockError
from api.models import Product
from utils.messages import LoginRequestedMessage


def redirect(app: App, target: str, reason: str = "") -> None:
    """Open the login screen, or switch to the named mode."""
    if target == "login":
        app.post_message(LoginRequestedMessage(reason))
    else:
        app.switch_mode(target)


def add_to_cart(node: DOMNode, product: Product, quantity: int = 1) -> bool:
    """
    Add to the shared cart on behalf of a widget or screen.

    Anonymous users get the explanation right away and are redirected
    once the delay has passed. Returns True when the cart changed.
    """
    app = node.app
    state = app.state
    try:
        line = state.cart.add_line(product, quantity, session=state.session)
    except AuthRequiredError as e:
        node.notify(e.message, severity="warning")
        app.set_timer(
            e.redirect_delay,
            lambda: redirect(app, e.redirect_to, e.message),
        )
        return False
    except OutOfStockError as e:
        node.notify(str(e), severity="error")
        return False

    node.notify(f"{product.name} added to cart ({line.quantity} in cart).")
    return True
