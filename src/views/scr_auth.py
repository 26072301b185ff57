from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from api.client import ApiError
from state.session import MalformedSessionError
from utils.pure import validate_login, validate_registration
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class AuthScreen(BaseScreen):
    """
    Log in or sign up. On success the session store holds the returned
    identity and the app moves on to the home view.
    """

    VIEW_NAME = "auth"

    def configure(self, header_sub_title: str = "", show_sidebar: bool = True) -> None:
        super().configure(header_sub_title="Log In to AgriHub", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-error", classes="hidden error")
        with TabbedContent(id="super-tab-auth"):
            with TabPane("Log in", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="your@email.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Log In", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Username")
                    yield Input(placeholder="your_username", id="input-reg-username")
                    yield Label("Email")
                    yield Input(placeholder="your@email.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="********", password=True, id="input-reg-pwd"
                    )
                    yield Label("Confirm Password")
                    yield Input(
                        placeholder="********", password=True, id="input-reg-pwd2"
                    )
                    with Horizontal(id="div-reg-btns"):
                        yield Button("Sign Up", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key != "enter":
            return
        if self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if self.focused == self.query_one("#input-reg-pwd2"):
            self.handle_registration_submit()

    @on(TabbedContent.TabActivated)
    def handle_tab_switch(self) -> None:
        self.show_error(None)
        for inp in self.query(Input):
            inp.value = ""
            inp.remove_class("-invalid")

    def _set_busy(self, busy: bool) -> None:
        for btn in self.query("#btn-login, #btn-reg").results(Button):
            btn.disabled = busy

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        error = validate_login(email, pwd)
        if error:
            self.show_error(error)
            return

        self.show_error(None)
        self._set_busy(True)
        try:
            payload = await self.api.login(email, pwd)
            await self._start_session(payload)
        except ApiError as e:
            self._fail(e.message, "#input-login-pwd")
        except MalformedSessionError:
            self._fail("Authentication failed", "#input-login-pwd")
        finally:
            self._set_busy(False)

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        username = self.query_one("#input-reg-username", Input).value.strip()
        email = self.query_one("#input-reg-email", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value
        pwd2 = self.query_one("#input-reg-pwd2", Input).value

        error = validate_registration(username, email, pwd, pwd2)
        if error:
            self.show_error(error)
            return

        self.show_error(None)
        self._set_busy(True)
        try:
            payload = await self.api.register(username, email, pwd)
            await self._start_session(payload)
        except ApiError as e:
            self._fail(e.message, "#input-reg-pwd")
        except MalformedSessionError:
            self._fail("Authentication failed", "#input-reg-pwd")
        finally:
            self._set_busy(False)

    async def _start_session(self, payload) -> None:
        session = await self.state.session.login(payload)
        self.notify(f"Hello {session.username}!")
        self.go("home")

    def _fail(self, message: str, pwd_input_id: str) -> None:
        self.show_error(message)
        self.notify(message, severity="error")
        input_pwd = self.query_one(pwd_input_id, Input)
        input_pwd.value = ""
        input_pwd.focus()
        input_pwd.add_class("-invalid")

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
