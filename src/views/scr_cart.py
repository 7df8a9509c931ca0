from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Label, Rule

from store.cart import TAX_RATE, CartLine
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.scr_checkout import CheckoutScreen


class CartItemRemoveMessage(Message):
    bubble = True

    def __init__(self, line: CartLine) -> None:
        super().__init__()
        self.line = line


class CartItemWidget(HorizontalGroup):
    def __init__(self, line: CartLine):
        super().__init__()
        self.line = line

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(self.line.name, id="label-item-name")
                yield Label(format_money(self.line.unit_price), id="label-item-price")
                yield Label(
                    f"= {format_money(self.line.line_total)}", id="label-item-total"
                )
            with Horizontal(id="div-actions"):
                yield Button("-", classes="btn-dec")
                yield Label(str(self.line.quantity), id="label-item-qty")
                yield Button(
                    "+",
                    classes="btn-inc",
                    disabled=0 < self.line.stock <= self.line.quantity,
                )
                yield Button("Remove", classes="btn-remove", variant="error")

    @on(Button.Pressed, ".btn-inc")
    def handle_inc(self):
        cart = self.app.state.cart
        cart.set_quantity(self.line.line_id, self.line.quantity + 1)

    @on(Button.Pressed, ".btn-dec")
    def handle_dec(self):
        self.app.state.cart.decrement(self.line.line_id)

    @on(Button.Pressed, ".btn-remove")
    def handle_remove(self):
        self.post_message(CartItemRemoveMessage(self.line))


class CartScreen(BaseScreen):
    """
    Lines of the shared cart, their totals, and the way into checkout.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Continue Shopping", id="btn-shop")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        self.render_cart()

    def on_cart_changed(self) -> None:
        super().on_cart_changed()
        self.render_cart()

    # exclusive, two quick clicks must not mount the lines twice
    @work(exclusive=True, group="cart")
    async def render_cart(self):
        cart = self.app.state.cart

        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        if cart.is_empty:
            content.add_class("no-items")
            await content.mount(Label("Your cart is empty.", id="label-empty-cart"))
        else:
            content.remove_class("no-items")
            await content.mount_all([CartItemWidget(line) for line in cart.lines])

        tax_pct = f"{TAX_RATE * 100:g}"
        self.query_one("#label-cart-total", Label).update(
            f"Subtotal: {format_money(cart.subtotal())}    "
            f"Tax ({tax_pct}%): {format_money(cart.tax())}    "
            f"Total: {format_money(cart.total())}"
        )
        self.query_one("#btn-checkout", Button).disabled = cart.is_empty
        self.query_one("#btn-clear-cart", Button).disabled = cart.is_empty

    @on(CartItemRemoveMessage)
    @work()
    async def handle_remove_item(self, message: CartItemRemoveMessage):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                f"Remove {message.line.name} from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )
        if remove_confirmed:
            self.app.state.cart.remove_line(message.line.line_id)
            self.notify("Item removed from cart.", severity="information")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        cart = self.app.state.cart
        if cart.is_empty:
            self.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            cart.clear()

    @on(Button.Pressed, "#btn-shop")
    async def handle_continue_shopping(self) -> None:
        await self.app.switch_mode("catalog")

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if self.app.state.cart.is_empty:
            self.notify("Cart is empty.", severity="warning")
            return

        await self.app.push_screen_wait(CheckoutScreen())
