from decimal import Decimal, InvalidOperation

from textual import on, work
from textual.app import ComposeResult
from textual.validation import Number
from textual.widgets import Button, Input, Label

from api.models import Product
from store.admin import ALL, IN_STOCK, OUT_OF_STOCK, ProductDesk
from utils.pure import format_money, generate_markdown_table
from views.scr_admin_base import AdminDeskScreen


class AdminProductsScreen(AdminDeskScreen):
    """
    Admins can look up a product and update its price/stock.
    """

    COLUMNS = ("Name", "Category", "Price", "Stock")
    STATUS_OPTIONS = (
        ("All products", ALL),
        ("In stock", IN_STOCK),
        ("Out of stock", OUT_OF_STOCK),
    )
    SEARCH_PLACEHOLDER = "Search for product..."
    ITEM_NOUN = "product"

    def make_desk(self) -> ProductDesk:
        state = self.app.state
        return ProductDesk(state.client, limit=state.settings.product_limit)

    def row(self, product: Product):
        return (
            product.name,
            product.category_name or "-",
            format_money(product.price),
            product.stock,
        )

    def detail_markdown(self, product: Product) -> str:
        rows = [
            ["ID", product.id],
            ["Slug", product.slug],
            ["Category", product.category_name or "-"],
            ["Price", format_money(product.price)],
            ["Stock", product.stock],
            ["Images", ", ".join(product.images) or "-"],
        ]
        return (
            f"### Product Detail: {product.name}\n\n"
            f"{product.description}\n\n"
            + generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        )

    def compose_actions(self) -> ComposeResult:
        yield Label("New Price ($):")
        yield Input(
            placeholder="leave blank to keep",
            id="input-price",
            type="number",
            validators=[Number(minimum=0.0)],
        )
        yield Label("New Stock:")
        yield Input(
            placeholder="leave blank to keep",
            id="input-stock",
            type="integer",
            validators=[Number(minimum=0)],
        )
        yield Button("Update", id="btn-update", variant="success")

    def on_item_selected(self, product: Product) -> None:
        # prefill inputs with current values for convenience
        self.query_one("#input-price", Input).value = f"{product.price:.2f}"
        self.query_one("#input-stock", Input).value = str(product.stock)

    @on(Button.Pressed, "#btn-update")
    @work(exclusive=True, group="admin-write")
    async def handle_update(self) -> None:
        product = self.desk.selected
        if product is None:
            return

        price_input = self.query_one("#input-price", Input)
        stock_input = self.query_one("#input-stock", Input)

        price = None
        if price_input.value.strip():
            try:
                price = Decimal(price_input.value.strip())
            except InvalidOperation:
                price_input.focus()
                price_input.add_class("-invalid")
                return

        stock = None
        if stock_input.value.strip():
            try:
                stock = int(stock_input.value.strip())
            except ValueError:
                stock_input.focus()
                stock_input.add_class("-invalid")
                return

        changed = await self.run_write(
            self.desk.update_price_stock(product.id, price=price, stock=stock),
        )
        if changed is False:
            self.notify("Nothing to update.", severity="warning")
        elif changed:
            self.notify("Product updated successfully.")
