from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import LoginRequestedMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal, ResizeScreenPromptModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("Account", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log in", id="btn-session", variant="primary")
        yield Label("Cart: 0 items", id="label-cart-count")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self):
        self.refresh_content()
        self.update_cart_count()

    def update_cart_count(self) -> None:
        count = self.app.state.cart.item_count
        self.query_one("#label-cart-count", Label).update(
            f"Cart: {count} item{'' if count == 1 else 's'}"
        )

    @work(exclusive=True, group="sidebar")
    async def refresh_content(self):
        session = self.app.state.session
        btn = self.query_one("#btn-session", Button)

        if session.is_authenticated:
            user = session.user
            rows = [
                ["Name", user.name],
                ["Email", user.email],
                ["Role", "Admin" if user.is_admin else "Customer"],
            ]
            btn.label = "Log out"
            btn.variant = "error"
        else:
            rows = [["Name", "Guest"], ["Role", "Not logged in"]]
            btn.label = "Log in"
            btn.variant = "primary"
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

        menu = {**self.app.CUSTOMER_MODES}
        if session.is_admin:
            menu.update(self.app.ADMIN_MODES)

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in menu.items()]
        )
        self.highlight_item(self.app.current_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.current_mode)
        if self.app.current_mode == selected_mode:
            return

        state = self.app.state
        if selected_mode in self.app.GUARDED_MODES and not state.session.is_authenticated:
            self.post_message(LoginRequestedMessage("Please log in to continue."))
            return
        if selected_mode in self.app.ADMIN_MODES and not state.is_admin:
            self.notify("Not Authorized", severity="error")
            return
        await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-session")
    @work()
    async def handle_session_button(self):
        if not self.app.state.session.is_authenticated:
            self.post_message(LoginRequestedMessage())
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.

    Screens follow the shared cart and session through on_cart_changed and
    on_session_changed, called synchronously on every change while mounted.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._unsubscribe = []

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Base Screen",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """

        self.app.title = "Shopfront"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                if k in self.app.ADMIN_MODES:
                    self.sub_title = "Admin: " + self.app.ADMIN_MODES[k]
                elif k in self.app.CUSTOMER_MODES:
                    self.sub_title = self.app.CUSTOMER_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def on_mount(self) -> None:
        state = self.app.state
        self._unsubscribe = [
            state.cart.subscribe(lambda _cart: self.on_cart_changed()),
            state.session.subscribe(lambda _session: self.on_session_changed()),
        ]

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def on_cart_changed(self) -> None:
        if self._show_sidebar:
            self.query_one(Sidebar).update_cart_count()

    def on_session_changed(self) -> None:
        if self._show_sidebar:
            self.query_one(Sidebar).refresh_content()

    def on_screen_resume(self) -> None:
        if self._show_sidebar and self.is_mounted:
            self.query_one(Sidebar).highlight_item(self.app.current_mode)

    async def on_resize(self, event: Resize) -> None:
        min_width = 80
        min_height = 24
        if event.size.width < min_width or event.size.height < min_height:
            self.app.push_screen(ResizeScreenPromptModal(min_width, min_height))

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
