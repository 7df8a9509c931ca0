from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from api.models import Product
from utils.pure import format_money, generate_markdown_table
from views.cart_actions import add_to_cart


class ProdDetailModal(ModalScreen[bool]):
    """
    product detail, plus ordering
    Will return True if the cart changed, False if not
    """

    order_qty = reactive(1)

    def __init__(self, product: Product) -> None:
        super().__init__()
        self._prod = product

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical(id="div-order-controls"):
                yield Label("Order Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        prod = self._prod
        table_rows = [
            ["Category", prod.category_name or "-"],
            ["Price", format_money(prod.price)],
            ["In stock", prod.stock],
            ["Reference", prod.slug],
            ["Image", prod.image],
        ]
        md = (
            f"### {prod.name}\n\n"
            f"{prod.description or '_No description._'}\n\n"
            + generate_markdown_table(["Attribute", "Value"], table_rows, ["l", "l"])
        )
        await self.query_one(MarkdownViewer).document.update(md)

        if not prod.in_stock:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Out of Stock"
            order_btn.disabled = True
            order_btn.variant = "warning"
            self.query_one("#btn-add-qty", Button).disabled = True
        else:
            self.query_one("#input-order-qty").validators = [
                Number(minimum=1, maximum=prod.stock)
            ]

        self.query_one("#input-order-qty").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and message.value
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def validate_order_qty(self, qty: int) -> int:
        return max(1, min(qty, self._prod.stock)) if self._prod.stock > 0 else 1

    def watch_order_qty(self, qty: int):
        self.query_one("#btn-sub-qty", Button).disabled = qty <= 1
        self.query_one("#btn-add-qty", Button).disabled = qty >= self._prod.stock

        input_order_qty = self.query_one("#input-order-qty", Input)
        if input_order_qty.value != str(qty):
            input_order_qty.value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.dismiss(add_to_cart(self, self._prod, self.order_qty))
