from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, MarkdownViewer, Select

from api.client import ApiError
from api.models import PAYMENT_METHODS
from utils import config
from utils.messages import CartChangedMessage
from utils.pure import format_money, generate_markdown_table, validate_checkout
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class CheckoutScreen(BaseScreen):
    """
    Order summary plus shipping address and payment method.
    Without a session or with an empty cart the screen only explains why and
    moves on to the auth / products view after a short delay.
    """

    VIEW_NAME = "checkout"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-error", classes="hidden error")
        with Vertical(id="div-checkout"):
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Shipping Address")
            yield Input(
                placeholder="Street, City, State, Zip Code",
                id="input-address-line",
            )
            yield Label("Payment Method")
            yield Select(
                [(title, key) for key, title in PAYMENT_METHODS.items()],
                value="card",
                allow_blank=False,
                id="select-payment",
            )
            with Horizontal():
                yield Button("Back to Cart", id="btn-back")
                yield Button("Place Order", id="btn-submit", variant="primary")
        with Vertical(id="div-order-success", classes="hidden"):
            yield Label("Order placed successfully!", id="label-success-title")
            yield Label("", id="label-order-id")
            with Horizontal():
                yield Button("View My Orders", id="btn-orders", variant="primary")
                yield Button("Continue Shopping", id="btn-continue")

    async def on_mount(self):
        if not self.state.session.is_authenticated:
            self._redirect("You must be logged in to checkout.", "auth")
            return
        if self.state.cart.is_empty():
            self._redirect(
                "Your cart is empty. Please add products before checking out.",
                "products",
            )
            return

        await self.render_summary()
        self.query_one("#input-address-line").focus()

    def _redirect(self, message: str, view: str) -> None:
        self.show_error(message)
        self.query_one("#div-checkout").add_class("hidden")
        self.set_timer(config.CHECKOUT_REDIRECT_DELAY, lambda: self.go(view))

    async def render_summary(self) -> None:
        items = self.state.cart.items()
        headers = ["Product", "Unit Price", "Quantity", "Line Total"]
        rows = [
            [
                item.name,
                f"{format_money(item.price)} / {item.unit}",
                item.quantity,
                format_money(item.line_total),
            ]
            for item in items
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            headers, rows, ["l", "r", "c", "r"]
        )
        md += f"\n\n**Total:** {format_money(self.state.cart.total())}"
        await self.query_one(MarkdownViewer).document.update(md)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        address_input = self.query_one("#input-address-line", Input)
        payment = self.query_one("#select-payment", Select)
        payment_method = None if payment.is_blank() else payment.value

        error = validate_checkout(
            address_input.value, payment_method, self.state.cart.is_empty()
        )
        if error:
            address_input.focus()
            address_input.add_class("-invalid")
            self.show_error(error)
            return
        self.show_error(None)

        if not await self.app.push_screen_wait(
            DialogModal(
                f"Place order for {format_money(self.state.cart.total())}?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        submit = self.query_one("#btn-submit", Button)
        submit.disabled = True
        try:
            order_id = await self.api.place_order(
                self.state.session.token,
                self.state.cart.items(),
                address_input.value.strip(),
                payment_method,
            )
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return
        finally:
            submit.disabled = False

        await self.state.cart.clear()
        self.post_message(CartChangedMessage())

        self.query_one("#div-checkout").add_class("hidden")
        self.query_one("#div-order-success").remove_class("hidden")
        self.query_one("#label-order-id", Label).update(
            f"Your order ID is {order_id}." if order_id else ""
        )
        self.notify("Order placed. Thank you for shopping with AgriHub!")

    @on(Button.Pressed, "#btn-back")
    def handle_back(self):
        self.go("cart")

    @on(Button.Pressed, "#btn-orders")
    def handle_orders(self):
        self.go("dashboard")

    @on(Button.Pressed, "#btn-continue")
    def handle_continue(self):
        self.go("products")
