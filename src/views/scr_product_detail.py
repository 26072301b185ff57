from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Button, Input, Label, MarkdownViewer

from api.client import ApiError
from api.models import Product
from utils.messages import CartChangedMessage
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen


class ProductDetailScreen(BaseScreen):
    """
    One product, fetched by the productId navigation param, with an order
    quantity stepper and Add to Cart.
    """

    VIEW_NAME = "product_detail"

    order_qty = reactive(1)

    def __init__(self, state, api, params=None):
        super().__init__(state, api, params)
        self._product: Optional[Product] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer(
                "### Loading product...", show_table_of_contents=False
            )
            with Vertical(id="div-order"):
                yield Label("", id="label-error", classes="hidden error")
                yield Label("", id="label-in-cart")
                yield Label("Order Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Back to Products", id="btn-back")
                    yield Button(
                        "Add to Cart", id="btn-addcart", variant="primary", disabled=True
                    )

    def on_mount(self):
        product_id = self.params.get("productId")
        if product_id is None:
            self.show_error("No product selected.")
            return
        self.load_product(product_id)

    @work(exclusive=True)
    async def load_product(self, product_id) -> None:
        try:
            self._product = await self.api.get_product(product_id)
        except ApiError as e:
            self.show_error(f"Error: {e.message}")
            await self.query_one(MarkdownViewer).document.update(
                "### Product unavailable"
            )
            return

        p = self._product
        table_rows = [
            ["Price", f"{format_money(p.price)} / {p.unit}"],
            ["Category", p.category_name],
            ["Farmer", p.farmer_username],
            ["Stock", p.stock_label],
            ["Image", p.image_url or "-"],
        ]
        md_table_str = generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )
        header_md = f"### {p.name}\n\n{p.description}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)

        order_btn = self.query_one("#btn-addcart", Button)
        if not p.in_stock:
            order_btn.label = "Out of Stock"
            order_btn.variant = "warning"
        else:
            order_btn.disabled = False
        self.render_in_cart()
        self.query_one("#input-order-qty").focus()

    def render_in_cart(self) -> None:
        item = self.state.cart.get(self._product.id) if self._product else None
        self.query_one("#label-in-cart", Label).update(
            f"In cart: {item.quantity}" if item else ""
        )

    def validate_order_qty(self, qty: int) -> int:
        upper = self._product.stock_quantity if self._product else qty
        return max(1, min(qty, max(upper, 1)))

    async def watch_order_qty(self, qty: int):
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        self.query_one("#btn-add-qty").disabled = bool(
            self._product and qty >= self._product.stock_quantity
        )
        input_order_qty = self.query_one("#input-order-qty", Input)
        if input_order_qty.value != str(qty):
            input_order_qty.value = str(qty)

    @on(Input.Changed, "#input-order-qty")
    def handle_qty_input(self, message: Input.Changed) -> None:
        if message.value and message.value.lstrip("-").isdigit():
            self.order_qty = int(message.value)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-back")
    def handle_back(self):
        self.go("products")

    @on(Button.Pressed, "#btn-addcart")
    async def handle_addcart(self):
        if not self._product or not self._product.in_stock:
            return
        if await self.state.cart.add(self._product, self.order_qty) is None:
            self.notify(f"Could not add {self._product.name} to cart.", severity="error")
            return
        self.notify(f"Added {self.order_qty} x {self._product.name} to cart.")
        self.post_message(CartChangedMessage())

    async def cart_changed(self) -> None:
        self.render_in_cart()
