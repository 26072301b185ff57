from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.screen import ModalScreen
from textual.widgets import LoadingIndicator

from api.client import AgriHubClient
from utils.logger import get_logger
from utils.messages import NavigateMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import AppState
from views.base_screen import BaseScreen
from views.scr_auth import AuthScreen
from views.scr_cart import CartScreen
from views.scr_checkout import CheckoutScreen
from views.scr_dashboard import DashboardScreen
from views.scr_events import EventsScreen
from views.scr_home import HomeScreen
from views.scr_product_detail import ProductDetailScreen
from views.scr_products import ProductsScreen
from views.scr_services import ServicesScreen

_logger = get_logger(__name__)


class AgriHubApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    # every navigable view; anything else falls back to home in the navigator
    VIEWS = {
        "home": HomeScreen,
        "products": ProductsScreen,
        "product_detail": ProductDetailScreen,
        "services": ServicesScreen,
        "events": EventsScreen,
        "dashboard": DashboardScreen,
        "cart": CartScreen,
        "checkout": CheckoutScreen,
        "auth": AuthScreen,
    }

    # sidebar entries, in display order
    MENU = {
        "home": "Home",
        "products": "Products",
        "services": "Services",
        "events": "Events",
        "dashboard": "Dashboard",
        "cart": "Cart",
    }

    VIEW_TITLES = {
        **MENU,
        "product_detail": "Product Detail",
        "checkout": "Checkout",
        "auth": "Log In",
    }

    CSS_PATH = "styles/agrihub.tcss"

    state: AppState

    def __init__(
        self,
        state: Optional[AppState] = None,
        api: Optional[AgriHubClient] = None,
    ):
        super().__init__()
        self.state = state or AppState()
        self.api = api or AgriHubClient()

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

    def build_screen(self, view: str) -> BaseScreen:
        return self.VIEWS[view](self.state, self.api, self.state.nav.params)

    async def show_current_view(self) -> None:
        """Render whatever the navigator resolves to under the current session."""
        view = self.state.nav.resolve(self.state.session.is_authenticated)
        _logger.debug(f"Showing view {view} (requested {self.state.nav.view})")
        screen = self.build_screen(view)
        while isinstance(self.screen, ModalScreen):
            await self.pop_screen()
        # bottom of the stack is the default screen holding the loading indicator
        if len(self.screen_stack) > 1:
            await self.switch_screen(screen)
        else:
            await self.push_screen(screen)

    @on(NavigateMessage)
    async def handle_navigate(self, message: NavigateMessage):
        self.state.nav.navigate(message.view, message.params)
        await self.show_current_view()

    @on(UserLogoutMessage)
    async def handle_user_logout(self):
        await self.state.session.logout()
        self.notify("Logout successful.")
        self.state.nav.navigate("home")
        await self.show_current_view()

    @on(QuitRequestedMessage)
    async def handle_quit(self):
        await self.api.aclose()
        self.exit()

    @work
    async def main_flow(self):
        await self.state.restore()
        await self.show_current_view()


def run():
    app = AgriHubApp()
    app.run()


if __name__ == "__main__":
    run()
