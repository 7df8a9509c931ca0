from math import ceil
from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from api import endpoints
from api.errors import ApiError
from api.models import Order
from utils.pure import format_date, format_money, generate_markdown_table, short_id
from views.base_screen import BaseScreen

PAGE_SIZE = 5


def order_detail_markdown(order: Optional[Order]) -> str:
    """Shared with the admin order desk."""
    if order is None:
        return "### Select an order to view its details."

    addr = order.shipping_address
    header = (
        f"### Order #{short_id(order.id)}\n"
        f"Placed: {format_date(order.created_at)}  \n"
        f"Status: **{order.status.capitalize()}**  \n"
        f"Ship To: {addr.full_name}, {addr.one_line()}  \n"
        f"Contact: {order.email} / {order.phone}  \n"
        f"Payment: {order.payment_method.replace('_', ' ').title()}\n\n"
    )
    rows = [
        [i.name, i.quantity, format_money(i.price), format_money(i.line_total)]
        for i in order.items
    ]
    items = generate_markdown_table(
        ["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
    )
    footer = (
        f"\n\nSubtotal: {format_money(order.subtotal)}  \n"
        f"Tax: {format_money(order.tax)}  \n"
        f"**Total:** {format_money(order.total)}"
    )
    if order.notes:
        footer += f"\n\n> {order.notes}"
    return header + (items or "_No items._") + footer


class MyOrdersScreen(BaseScreen):
    """
    Customers can browse their past orders with pagination and view details.

    Layout:
    - Markdown detail view at the top, showing selected order details.
    - Orders table below (newest first), 5 per page with Prev/Next.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self) -> None:
        super().__init__()
        self._orders: List[Order] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("<", id="btn-prev")
            yield Label("1 / 1", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order", "Date", "Items", "Status", "Total")

    def action_noop(self) -> None:
        pass

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    def handle_refresh(self):
        self.load_orders()

    def on_session_changed(self) -> None:
        super().on_session_changed()
        if self.app.state.session.is_authenticated:
            self.load_orders()

    @work(exclusive=True, group="orders")
    async def load_orders(self) -> None:
        try:
            orders = await endpoints.my_orders(self.app.state.client)
        except ApiError as e:
            self.notify(f"Could not load your orders: {e}", severity="error")
            self._orders = []
            self.render_page()
            return

        # newest first, undated orders last
        orders.sort(
            key=lambda o: o.created_at.timestamp() if o.created_at else 0,
            reverse=True,
        )
        self._orders = orders
        self.page_cnt = max(ceil(len(orders) / PAGE_SIZE), 1)
        self.page_idx = 1
        self.render_page()

    def _page(self) -> List[Order]:
        start = (self.page_idx - 1) * PAGE_SIZE
        return self._orders[start : start + PAGE_SIZE]

    def render_page(self) -> None:
        page = self._page()
        table = self.query_one(DataTable)
        table.clear()
        for idx, o in enumerate(page):
            table.add_row(
                short_id(o.id),
                format_date(o.created_at),
                o.item_count,
                o.status.capitalize(),
                format_money(o.total),
                key=str(idx),
            )

        self.query_one("#label-page", Label).update(f"{self.page_idx} / {self.page_cnt}")
        self.query_one("#btn-prev", Button).disabled = self.page_idx <= 1
        self.query_one("#btn-next", Button).disabled = self.page_idx >= self.page_cnt

        if page:
            table.move_cursor(row=0)
            self.render_detail(page[0])
        elif self._orders:
            self.render_detail(None)
        else:
            self.query_one("#md-order-detail", MarkdownViewer).document.update(
                "### No orders yet.\n\nPlaced orders will show up here."
            )

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1
            self.render_page()

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1
            self.render_page()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        page = self._page()
        idx = int(event.row_key.value)
        if idx < len(page):
            self.render_detail(page[idx])

    def render_detail(self, order: Optional[Order]) -> None:
        self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_detail_markdown(order)
        )
