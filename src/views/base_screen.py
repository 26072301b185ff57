from typing import Any, Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from api.client import AgriHubClient
from utils.messages import CartChangedMessage, NavigateMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from utils.state import AppState
from views.modal_dialog import DialogModal, QuitDialogModal
from views.modal_resize import ResizeScreenPromptModal

MIN_WIDTH = 60
MIN_HEIGHT = 20


class Sidebar(Container):
    """
    User panel plus the view menu. Rebuilt with every screen, so it always
    reflects the session at the time of navigation.
    """

    def __init__(self, state: AppState, active_view: str):
        super().__init__()
        self.state = state
        self.active_view = active_view

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        if self.state.session.is_authenticated:
            yield Button("Log out", id="btn-logout", variant="error")
        else:
            yield Button("Log in", id="btn-login", variant="primary")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        session = self.state.session.current
        if session:
            table_rows = [
                ["User", session.username],
                ["Email", session.email],
                ["Role", session.role.capitalize()],
            ]
            md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        else:
            md_table_str = "Not logged in."
        await self.query_one(Markdown).update(md_table_str)

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(title, id="label-menu-" + view), id="list-menu-item-" + view)
                for view, title in self.app.MENU.items()
                # dashboard only makes sense with an identity
                if view != "dashboard" or session
            ]
        )
        self.update_cart_badge()
        self.highlight_item(self.active_view)

    def update_cart_badge(self) -> None:
        cnt = self.state.cart.count()
        title = self.app.MENU["cart"]
        self.query_one("#label-menu-cart", Label).update(
            f"{title} ({cnt})" if cnt else title
        )

    def highlight_item(self, view: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + view

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_view = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.active_view)
        if selected_view != self.active_view:
            self.app.post_message(NavigateMessage(selected_view))

    @on(Button.Pressed, "#btn-login")
    def handle_login(self):
        self.app.post_message(NavigateMessage("auth"))

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.app.post_message(UserLogoutMessage())


class BaseScreen(Screen):
    """
    Inherited by all view screens, contains common elements like
    headers, footers, sidebar, and keybindings.

    Screens get the client-side state and the API client injected; params
    are the navigation parameters for this view only.
    """

    VIEW_NAME = ""

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(
        self,
        state: AppState,
        api: AgriHubClient,
        params: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        self.state = state
        self.api = api
        self.params = dict(params or {})

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "AgriHub"
        self.sub_title = header_sub_title or self.app.VIEW_TITLES.get(
            self.VIEW_NAME, ""
        )
        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar(self.state, self.VIEW_NAME)
        yield Header()
        yield Footer(show_command_palette=False)

    def go(self, view: str, **params) -> None:
        """Ask the app to navigate; params replace whatever the current view had."""
        self.app.post_message(NavigateMessage(view, params))

    def show_error(self, message: Optional[str], label_id: str = "#label-error") -> None:
        """Inline error line; an empty message hides it."""
        label = self.query_one(label_id, Label)
        label.update(message or "")
        label.set_class(not message, "hidden")

    async def on_resize(self, event: Resize) -> None:
        if isinstance(self.app.screen, ResizeScreenPromptModal):
            return
        if event.size.width < MIN_WIDTH or event.size.height < MIN_HEIGHT:
            self.app.push_screen(ResizeScreenPromptModal(MIN_WIDTH, MIN_HEIGHT))

    @on(CartChangedMessage)
    async def handle_cart_changed(self) -> None:
        if self._show_sidebar:
            self.query_one(Sidebar).update_cart_badge()
        await self.cart_changed()

    async def cart_changed(self) -> None:
        """Hook for screens that render the cart."""

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
