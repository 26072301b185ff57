from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Label, Rule

from state.cart import LineItem
from utils.messages import CartChangedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class CartItemQuantityMessage(Message):
    bubble = True

    def __init__(self, product_id, quantity: int) -> None:
        super().__init__()
        self.product_id = product_id
        self.quantity = quantity


class CartItemRemoveMessage(Message):
    bubble = True

    def __init__(self, product_id) -> None:
        super().__init__()
        self.product_id = product_id


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: LineItem):
        super().__init__(classes="cart-item")
        self.item = item

    def compose(self) -> ComposeResult:
        with Container(classes="div-item"):
            yield Label(self.item.name, classes="label-item-name")
            yield Label(
                f"{format_money(self.item.price)} / {self.item.unit}",
                classes="label-item-price",
            )
        with Horizontal(classes="div-qty"):
            yield Button("-", classes="btn-dec")
            yield Label(str(self.item.quantity), classes="label-item-qty")
            yield Button("+", classes="btn-inc")
        yield Label(format_money(self.item.line_total), classes="label-line-total")
        yield Button("Remove", classes="btn-remove", variant="error")

    @on(Button.Pressed, ".btn-dec")
    def handle_decrease(self):
        # stepping below 1 removes the line
        self.post_message(CartItemQuantityMessage(self.item.id, self.item.quantity - 1))

    @on(Button.Pressed, ".btn-inc")
    def handle_increase(self):
        self.post_message(CartItemQuantityMessage(self.item.id, self.item.quantity + 1))

    @on(Button.Pressed, ".btn-remove")
    def handle_remove(self):
        self.post_message(CartItemRemoveMessage(self.item.id))


class CartScreen(BaseScreen):
    """
    Line items with quantity controls, the cart total, and the way on to
    checkout.
    """

    VIEW_NAME = "cart"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        with Horizontal(id="hort-cart-empty", classes="hidden"):
            yield Label("Your cart is empty.", id="label-cart-empty")
            yield Button("Start Shopping", id="btn-shop", variant="primary")
        yield Label("Total: $0.00", id="label-cart-total")
        yield Label("", id="label-login-hint", classes="hidden")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Proceed to Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        await self.render_cart()

    async def cart_changed(self) -> None:
        await self.render_cart()

    async def render_cart(self) -> None:
        items = self.state.cart.items()

        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in items])

        empty = not items
        self.query_one("#hort-cart-empty").set_class(not empty, "hidden")
        self.query_one("#vertscroll-content").set_class(empty, "hidden")
        self.query_one("#hort-buttons").set_class(empty, "hidden")
        self.query_one("#label-cart-total", Label).update(
            f"Total: {format_money(self.state.cart.total())}"
        )

        logged_in = self.state.session.is_authenticated
        self.query_one("#btn-checkout", Button).disabled = not logged_in
        hint = self.query_one("#label-login-hint", Label)
        hint.update("Please log in to proceed to checkout.")
        hint.set_class(logged_in or empty, "hidden")

    @on(CartItemQuantityMessage)
    async def handle_quantity(self, message: CartItemQuantityMessage) -> None:
        await self.state.cart.set_quantity(message.product_id, message.quantity)
        self.post_message(CartChangedMessage())

    @on(CartItemRemoveMessage)
    @work()
    async def handle_remove_item(self, message: CartItemRemoveMessage):
        item = self.state.cart.get(message.product_id)
        if item is None:
            return
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                f"Remove {item.name} from your cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )

        if remove_confirmed:
            await self.state.cart.remove(message.product_id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if self.state.cart.is_empty():
            self.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            await self.state.cart.clear()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-shop")
    def handle_start_shopping(self) -> None:
        self.go("products")

    @on(Button.Pressed, "#btn-checkout")
    def handle_checkout(self) -> None:
        if self.state.cart.is_empty():
            self.notify("Cart is empty.", severity="warning")
            return
        self.go("checkout")
