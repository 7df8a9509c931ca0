from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, MarkdownViewer

from api import endpoints
from api.errors import ApiError
from store.admin import summarize_orders
from utils.messages import UserLogoutMessage
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class ProfileScreen(BaseScreen):
    """
    Account details and a short summary of the user's own orders.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-profile", show_table_of_contents=False)
            with Horizontal(id="hort-profile-btns"):
                yield Button("My Orders", id="btn-orders", variant="primary")
                yield Button("Admin Dashboard", id="btn-admin")
                yield Button("Log out", id="btn-logout", variant="error")

    @on(ScreenResume)
    def handle_resume(self) -> None:
        self.query_one("#btn-admin").display = self.app.state.is_admin
        self.render_profile()

    def on_session_changed(self) -> None:
        super().on_session_changed()
        if self.app.state.session.is_authenticated:
            self.query_one("#btn-admin").display = self.app.state.is_admin
            self.render_profile()

    @work(exclusive=True, group="profile")
    async def render_profile(self) -> None:
        user = self.app.state.session.user
        if user is None:
            await self.query_one(MarkdownViewer).document.update(
                "### Not logged in."
            )
            return

        rows = [
            ["Name", user.name],
            ["Email", user.email],
            ["Role", "Administrator" if user.is_admin else "Customer"],
            ["Account ID", user.id],
        ]
        md = f"### {user.name}\n\n" + generate_markdown_table(
            ["Field", "Value"], rows, ["l", "l"]
        )

        try:
            orders = await endpoints.my_orders(self.app.state.client)
        except ApiError as e:
            md += f"\n\n_Order history unavailable: {e}_"
        else:
            summary = summarize_orders(orders)
            md += (
                "\n\n### Order History\n\n"
                f"- Orders placed: {summary.order_count}\n"
                f"- Items bought: {summary.items_sold}\n"
                f"- Total spent: {format_money(summary.revenue)}\n"
            )
        await self.query_one(MarkdownViewer).document.update(md)

    @on(Button.Pressed, "#btn-orders")
    async def handle_orders(self) -> None:
        await self.app.switch_mode("orders")

    @on(Button.Pressed, "#btn-admin")
    async def handle_admin(self) -> None:
        await self.app.switch_mode("adm_overview")

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self) -> None:
        if await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            self.post_message(UserLogoutMessage())
