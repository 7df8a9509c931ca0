from dataclasses import fields

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Grid, Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label, MarkdownViewer

from api import endpoints
from api.errors import ApiError, CheckoutBusyError, EmptyCartError, ValidationError
from store.checkout import FIELD_LABELS, CheckoutFlow, CheckoutForm, validate
from utils.messages import NewOrderMessage
from utils.pure import format_money, generate_markdown_table, short_id
from views.base_screen import BaseScreen
from views.modal_dialog import AlertModal, DialogModal

PLACEHOLDERS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane@example.com",
    "phone": "555-0100",
    "address": "123 Main St",
    "city": "Anytown",
    "state": "ST",
    "zip_code": "00000",
}


class CheckoutScreen(BaseScreen):
    """
    Shipping form and order summary. Dismisses True once the order is placed,
    False if the user goes back.
    """

    BINDINGS = [("escape", "back", "Back")]

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Checkout", show_sidebar=False)
        self.flow = CheckoutFlow(
            self.app.state.cart,
            lambda payload: endpoints.create_order(self.app.state.client, payload),
        )

    def compose(self) -> ComposeResult:
        yield from super().compose()
        if self.flow.is_empty:
            with Vertical(id="div-checkout-empty"):
                yield Label("No Items in Cart")
                yield Button("Continue Shopping", id="btn-shop", variant="primary")
            return

        with Horizontal(id="hort-checkout"):
            with VerticalScroll(id="div-shipping"):
                yield Label("Shipping Information", classes="section-title")
                with Grid(id="grid-shipping"):
                    for f in fields(CheckoutForm):
                        with Vertical(classes="field"):
                            yield Label(FIELD_LABELS[f.name])
                            yield Input(
                                placeholder=PLACEHOLDERS[f.name],
                                id=f"input-{f.name}",
                            )
                            yield Label("", id=f"error-{f.name}", classes="field-error")
                yield Label("Payment: Cash on Delivery", id="label-payment")
            with Vertical(id="div-summary"):
                yield MarkdownViewer("", show_table_of_contents=False)
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        if self.flow.is_empty:
            return

        user = self.app.state.session.user
        if user is not None:
            first, _, last = user.name.partition(" ")
            self.query_one("#input-first_name", Input).value = first
            self.query_one("#input-last_name", Input).value = last
            self.query_one("#input-email", Input).value = user.email

        cart = self.app.state.cart
        rows = [
            [
                line.name,
                format_money(line.unit_price),
                line.quantity,
                format_money(line.line_total),
            ]
            for line in cart.lines
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            ["Product", "Unit Price", "Qty", "Total"], rows, ["l", "r", "c", "r"]
        )
        md += (
            f"\n\n**Subtotal:** {format_money(cart.subtotal())}  \n"
            f"**Tax:** {format_money(cart.tax())}  \n"
            f"**Total:** {format_money(cart.total())}"
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-first_name").focus()

    def action_back(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-shop")
    async def handle_continue_shopping(self):
        self.dismiss(False)
        await self.app.switch_mode("catalog")

    def read_form(self) -> CheckoutForm:
        return CheckoutForm(
            **{
                f.name: self.query_one(f"#input-{f.name}", Input).value
                for f in fields(CheckoutForm)
            }
        )

    def show_errors(self, errors) -> None:
        for f in fields(CheckoutForm):
            message = errors.get(f.name, "")
            self.query_one(f"#error-{f.name}", Label).update(message)
            field_input = self.query_one(f"#input-{f.name}", Input)
            if message:
                field_input.add_class("-invalid")
            else:
                field_input.remove_class("-invalid")

    @on(Button.Pressed, "#btn-submit")
    def handle_submit(self) -> None:
        btn = self.query_one("#btn-submit", Button)
        # presses queued behind the first one find the button disabled
        if btn.disabled or self.flow.in_flight:
            return
        btn.disabled = True
        btn.label = "Placing Order..."
        self.run_submit()

    @work(group="checkout")
    async def run_submit(self) -> None:
        btn = self.query_one("#btn-submit", Button)
        try:
            await self.place_order()
        finally:
            if self.is_mounted:
                btn.disabled = False
                btn.label = "Place Order"

    async def place_order(self) -> None:
        form = self.read_form()
        # validate before asking, the flow validates again on submit
        errors = validate(form)
        self.show_errors(errors)
        if errors:
            first = next(iter(errors))
            self.query_one(f"#input-{first}").focus()
            self.notify("Please fix the highlighted fields.", severity="error")
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                f"Place order for {format_money(self.app.state.cart.total())}?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        try:
            order = await self.flow.submit(form)
        except ValidationError as e:
            self.show_errors(e.errors)
            return
        except (CheckoutBusyError, EmptyCartError) as e:
            self.notify(str(e), severity="warning")
            return
        except ApiError:
            await self.app.push_screen_wait(AlertModal(self.flow.error))
            return

        ref = f" Order #{short_id(order.id)}." if order else ""
        self.notify(f"Order placed successfully!{ref}")
        self.app.post_message(NewOrderMessage())
        self.dismiss(True)
