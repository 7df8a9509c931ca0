from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer

from api import endpoints
from api.errors import ApiError
from store.admin import summarize_orders
from utils.pure import format_date, format_money, generate_markdown_table, short_id
from views.base_screen import BaseScreen

RECENT_COUNT = 5


class AdminOverviewScreen(BaseScreen):
    """
    Store at a glance: order totals, orders per status, latest orders.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-top", show_table_of_contents=False)

    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        viewer = self.query_one("#md-top", MarkdownViewer)
        try:
            orders = await endpoints.admin_list_orders(self.app.state.client)
        except ApiError as e:
            await viewer.document.update(f"### Dashboard unavailable\n\n{e}")
            return

        summary = summarize_orders(orders)
        avg = summary.revenue / summary.order_count if summary.order_count else 0

        overview_md = (
            "### Store Overview\n\n"
            f"- Orders: {summary.order_count}\n"
            f"- Distinct Customers: {summary.distinct_customers}\n"
            f"- Items Sold: {summary.items_sold}\n"
            f"- Revenue (excl. cancelled): {format_money(summary.revenue)}\n"
            f"- Avg Order Value: {format_money(avg)}\n\n"
        )

        status_md = "### Orders by Status\n\n" + generate_markdown_table(
            ["Status", "Count"],
            [[s.capitalize(), n] for s, n in summary.by_status.items()],
            ["l", "r"],
        )

        recent = sorted(
            orders,
            key=lambda o: o.created_at.timestamp() if o.created_at else 0,
            reverse=True,
        )[:RECENT_COUNT]
        recent_md = "\n\n### Recent Orders\n\n" + (
            generate_markdown_table(
                ["Order", "Customer", "Date", "Status", "Total"],
                [
                    [
                        short_id(o.id),
                        o.customer_name or o.email,
                        format_date(o.created_at),
                        o.status.capitalize(),
                        format_money(o.total),
                    ]
                    for o in recent
                ],
                ["l", "l", "l", "l", "r"],
            )
            or "_No orders yet._"
        )

        await viewer.document.update(overview_md + status_md + recent_md)
