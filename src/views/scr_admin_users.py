from textual import on, work
from textual.app import ComposeResult
from textual.widgets import Button, Label, Select

from api.models import UserAccount
from store.admin import ALL, ROLES, UserDesk
from utils.pure import format_date, generate_markdown_table
from views.scr_admin_base import AdminDeskScreen


class AdminUsersScreen(AdminDeskScreen):
    """
    Registered accounts. Admins can promote, demote and remove users,
    but never their own account.
    """

    COLUMNS = ("Name", "Email", "Role", "Joined")
    STATUS_OPTIONS = (("All roles", ALL),) + tuple((r, r.lower()) for r in ROLES)
    SEARCH_PLACEHOLDER = "Search by name, email or id..."
    ITEM_NOUN = "user"

    def make_desk(self) -> UserDesk:
        return UserDesk(self.app.state.client)

    def row(self, user: UserAccount):
        return (user.name, user.email, user.role, format_date(user.created_at))

    def detail_markdown(self, user: UserAccount) -> str:
        rows = [
            ["ID", user.id],
            ["Email", user.email],
            ["Role", user.role],
            ["Joined", format_date(user.created_at)],
        ]
        return f"### {user.name}\n\n" + generate_markdown_table(
            ["Field", "Value"], rows, ["l", "l"]
        )

    def compose_actions(self) -> ComposeResult:
        yield Label("Role")
        yield Select(
            [(r, r) for r in ROLES],
            value=ROLES[0],
            allow_blank=False,
            id="select-role",
        )
        yield Button("Set Role", id="btn-set-role", variant="success")

    def on_item_selected(self, user: UserAccount) -> None:
        if user.role in ROLES:
            self.query_one("#select-role", Select).value = user.role
        is_self = self._is_current_user(user)
        self.query_one("#btn-set-role", Button).disabled = is_self
        self.query_one("#btn-delete", Button).disabled = is_self

    def _is_current_user(self, user: UserAccount) -> bool:
        me = self.app.state.session.user
        return me is not None and me.id == user.id

    @on(Button.Pressed, "#btn-set-role")
    @work(exclusive=True, group="admin-write")
    async def handle_set_role(self) -> None:
        user = self.desk.selected
        if user is None or self._is_current_user(user):
            return
        role = self.query_one("#select-role", Select).value
        if role == user.role:
            self.notify("User already has that role.", severity="warning")
            return
        await self.run_write(
            self.desk.set_role(user.id, role),
            success=f"{user.name} is now {role}.",
        )
