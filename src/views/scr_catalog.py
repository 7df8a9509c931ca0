from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import DataTable, Input, Label, Select

from api.models import Product
from store import catalog
from store.catalog import ALL_CATEGORIES, CATEGORIES, SortKey
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.cart_actions import add_to_cart
from views.modal_prod_detail import ProdDetailModal


class CatalogScreen(BaseScreen):
    """
    Product browsing. The category goes to the server, the text query and
    the sort are applied locally over what was fetched.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
        Binding("a", "add_to_cart", "Add to Cart", show=True),
        Binding("ctrl+l", "clear_filters", "Clear Filters", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._fetched: List[Product] = []
        self._visible: List[Product] = []
        self._demo = False

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder="Search pumps...")
            yield Select(
                [(c, c) for c in CATEGORIES],
                value=ALL_CATEGORIES,
                allow_blank=False,
                id="select-category",
            )
            yield Select(
                [(k.label, k.value) for k in SortKey],
                value=SortKey.NEWEST.value,
                allow_blank=False,
                id="select-sort",
            )
        yield Label("Loading products...", id="label-results")
        yield DataTable(id="table-products")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Price", "Stock")

        self.query_one("#input-search").focus()
        self.load_products()

    def action_noop(self) -> None:
        pass

    @property
    def category(self) -> str:
        return self.query_one("#select-category", Select).value

    @property
    def sort_key(self) -> str:
        return self.query_one("#select-sort", Select).value

    @property
    def query_str(self) -> str:
        return self.query_one("#input-search", Input).value

    @on(Select.Changed, "#select-category")
    def handle_category_change(self) -> None:
        self.load_products()

    @on(Select.Changed, "#select-sort")
    @on(Input.Changed, "#input-search")
    def handle_local_criteria_change(self) -> None:
        self.render_products()

    def action_clear_filters(self) -> None:
        self.query_one("#input-search", Input).value = ""
        self.query_one("#select-category", Select).value = ALL_CATEGORIES

    # exclusive: a newer category request cancels the one still in flight
    @work(exclusive=True, group="catalog")
    async def load_products(self) -> None:
        state = self.app.state
        self.query_one("#label-results", Label).update("Loading products...")
        loaded = await catalog.load_products(
            state.client, self.category, state.settings.product_limit
        )
        self._fetched = loaded.products
        self._demo = loaded.demo
        if loaded.demo:
            self.notify(
                "Store is offline, showing demo products.",
                severity="warning",
            )
        self.render_products()

    def render_products(self) -> None:
        self._visible = catalog.apply(self._fetched, self.query_str, self.sort_key)

        table = self.query_one(DataTable)
        table.clear()
        for idx, p in enumerate(self._visible):
            table.add_row(
                p.name,
                p.category_name or "-",
                format_money(p.price),
                str(p.stock) if p.in_stock else "Out of stock",
                key=str(idx),
            )

        info = f"Showing {len(self._visible)} of {len(self._fetched)} products"
        if self._demo:
            info += "  (demo data)"
        if not self._visible and self._fetched:
            info += ". Try adjusting your search or filter criteria."
        self.query_one("#label-results", Label).update(info)

    def _highlighted(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row = table.cursor_row
        if row is None or row >= len(self._visible):
            return None
        return self._visible[row]

    @on(DataTable.RowSelected)
    @work()
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        product = self._visible[int(event.row_key.value)]
        await self.app.push_screen_wait(ProdDetailModal(product))

    def action_add_to_cart(self) -> None:
        product = self._highlighted()
        if product is not None:
            add_to_cart(self, product, 1)
