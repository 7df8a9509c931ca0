from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import (
    LoginRequestedMessage,
    NewOrderMessage,
    QuitRequestedMessage,
    UserLogoutMessage,
)
from utils.state import ShopState
from views.scr_admin_categories import AdminCategoriesScreen
from views.scr_admin_orders import AdminOrdersScreen
from views.scr_admin_overview import AdminOverviewScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_admin_users import AdminUsersScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen
from views.scr_my_orders import MyOrdersScreen
from views.scr_profile import ProfileScreen

_logger = get_logger(__name__)


class ShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "orders": MyOrdersScreen,
        "profile": ProfileScreen,
        "adm_overview": AdminOverviewScreen,
        "adm_orders": AdminOrdersScreen,
        "adm_products": AdminProductsScreen,
        "adm_categories": AdminCategoriesScreen,
        "adm_users": AdminUsersScreen,
    }

    CUSTOMER_MODES = {
        "catalog": "Our Products",
        "cart": "Cart",
        "orders": "My Orders",
        "profile": "Profile",
    }
    ADMIN_MODES = {
        "adm_overview": "Overview",
        "adm_orders": "Orders",
        "adm_products": "Products",
        "adm_categories": "Categories",
        "adm_users": "Users",
    }
    # modes that need a logged in user
    GUARDED_MODES = {"cart", "orders", "profile"}

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/catalog.tcss",
        "styles/cart.tcss",
        "styles/checkout.tcss",
        "styles/orders.tcss",
        "styles/admin.tcss",
    ]

    state: ShopState

    def __init__(self, state: ShopState):
        super().__init__()
        self.state = state

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def main_flow(self):
        if await self.state.start():
            self.notify(f"Welcome back, {self.state.session.user.name}!")
        await self.switch_mode("catalog")

    @on(LoginRequestedMessage)
    @work(exclusive=True, group="login")
    async def handle_login_requested(self, message: LoginRequestedMessage):
        if isinstance(self.screen, LoginScreen):
            return
        await self.push_screen_wait(LoginScreen(message.reason))

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.end_session()
        self.notify("Logout successful.")
        if self.current_mode in self.GUARDED_MODES | set(self.ADMIN_MODES):
            await self.switch_mode("catalog")

    @on(NewOrderMessage)
    async def handle_new_order(self):
        await self.switch_mode("orders")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        _logger.debug("Quit requested.")
        self.exit()


def run() -> None:
    ShopApp(ShopState.build()).run()


if __name__ == "__main__":
    run()
