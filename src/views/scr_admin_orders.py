from textual import on, work
from textual.app import ComposeResult
from textual.widgets import Button, Label, Select

from api.models import ADMIN_STATUSES, Order
from store.admin import ALL, OrderDesk
from utils.pure import format_date, format_money, short_id
from views.scr_admin_base import AdminDeskScreen
from views.scr_my_orders import order_detail_markdown


class AdminOrdersScreen(AdminDeskScreen):
    """
    Every order in the store. Admins move orders through their statuses
    or delete them.
    """

    COLUMNS = ("Order", "Customer", "Email", "Date", "Items", "Status", "Total")
    STATUS_OPTIONS = (("All statuses", ALL),) + tuple(
        (s.capitalize(), s) for s in ADMIN_STATUSES
    )
    SEARCH_PLACEHOLDER = "Search by order id, email or customer..."
    ITEM_NOUN = "order"

    def make_desk(self) -> OrderDesk:
        return OrderDesk(self.app.state.client)

    def row(self, order: Order):
        return (
            short_id(order.id),
            order.customer_name or "-",
            order.email,
            format_date(order.created_at),
            order.item_count,
            order.status.capitalize(),
            format_money(order.total),
        )

    def detail_markdown(self, order: Order) -> str:
        return order_detail_markdown(order)

    def describe(self, order: Order) -> str:
        return "#" + short_id(order.id)

    def compose_actions(self) -> ComposeResult:
        yield Label("Order Status")
        yield Select(
            [(s.capitalize(), s) for s in ADMIN_STATUSES],
            value=ADMIN_STATUSES[0],
            allow_blank=False,
            id="select-order-status",
        )
        yield Button("Update Status", id="btn-update-status", variant="success")

    def on_item_selected(self, order: Order) -> None:
        known = order.status in ADMIN_STATUSES
        if known:
            self.query_one("#select-order-status", Select).value = order.status
        # an unknown status would leave the previous order's value in the select
        self.query_one("#btn-update-status", Button).disabled = not known

    @on(Button.Pressed, "#btn-update-status")
    @work(exclusive=True, group="admin-write")
    async def handle_update_status(self) -> None:
        order = self.desk.selected
        if order is None:
            return
        status = self.query_one("#select-order-status", Select).value
        if status == order.status:
            self.notify("Order already has that status.", severity="warning")
            return
        await self.run_write(
            self.desk.update_status(order.id, status),
            success=f"Order #{short_id(order.id)} is now {status}.",
        )
