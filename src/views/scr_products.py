from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Input, Label, Select

from api.client import ApiError
from api.models import Category, Product
from utils.messages import CartChangedMessage
from utils.pure import can_manage_product, filter_products, format_money
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_product_form import ProductFormModal


class ProductsScreen(BaseScreen):
    """
    Product listing with a category filter (server side) and a search box
    (client side). Farmers and admins also get add / edit / delete.
    """

    VIEW_NAME = "products"

    # display only, the DataTable handles enter itself
    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
        Binding("a", "add_to_cart", "Add to Cart", show=True),
    ]

    def __init__(self, state, api, params=None):
        super().__init__(state, api, params)
        self._categories: List[Category] = []
        self._products: List[Product] = []
        self._visible: List[Product] = []
        self._search_term = ""

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Select(
                [],
                prompt="All Categories",
                id="select-category",
            )
            yield Input(id="input-search", placeholder="Search products...")
        yield Label("", id="label-error", classes="hidden error")
        yield DataTable(id="table-products")
        with Horizontal(id="hort-product-btns"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("View Details", id="btn-details")
            yield Button("Add to Cart", id="btn-addcart", variant="primary")
            if self.state.session.has_role("farmer", "admin"):
                yield Button("Add Product", id="btn-new", variant="success")
                yield Button("Edit", id="btn-edit")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Farmer", "Price", "Stock")

        category = self.params.get("categoryId")
        self.load_categories(category)
        self.load_products(category)
        self.query_one("#input-search").focus()

    def _selected_category(self):
        select = self.query_one("#select-category", Select)
        return None if select.is_blank() else select.value

    def _selected_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0 or table.cursor_row is None:
            return None
        if table.cursor_row >= len(self._visible):
            return None
        return self._visible[table.cursor_row]

    @work(exclusive=True, group="categories")
    async def load_categories(self, selected=None) -> None:
        try:
            self._categories = await self.api.list_categories()
        except ApiError as e:
            self.show_error(e.message)
            return

        select = self.query_one("#select-category", Select)
        with select.prevent(Select.Changed):
            select.set_options([(c.name, c.id) for c in self._categories])
            if selected is not None and selected in {c.id for c in self._categories}:
                select.value = selected

    @work(exclusive=True, group="products")
    async def load_products(self, category=None) -> None:
        """(Re)fetch the product list; mutations call this instead of patching rows."""
        table = self.query_one(DataTable)
        table.loading = True
        try:
            self._products = await self.api.list_products(category=category)
            self.show_error(None)
        except ApiError as e:
            self._products = []
            self.show_error(e.message)
        finally:
            table.loading = False
        self.render_table()

    def render_table(self) -> None:
        self._visible = filter_products(self._products, self._search_term)

        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (
                    p.name,
                    p.category_name,
                    p.farmer_username,
                    f"{format_money(p.price)} / {p.unit}",
                    p.stock_label,
                )
                for p in self._visible
            ]
        )
        if not self._visible and self._products:
            self.notify("No products match your search.", severity="warning")

    @on(Select.Changed, "#select-category")
    def handle_category_change(self) -> None:
        self.load_products(self._selected_category())

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self._search_term = message.value
        self.render_table()

    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh(self) -> None:
        self.load_products(self._selected_category())

    @on(DataTable.RowSelected)
    @on(Button.Pressed, "#btn-details")
    def handle_details(self) -> None:
        product = self._selected_product()
        if product:
            self.go("product_detail", productId=product.id)

    def action_noop(self) -> None:
        pass

    @on(Button.Pressed, "#btn-addcart")
    async def action_add_to_cart(self) -> None:
        product = self._selected_product()
        if product is None:
            return
        if not product.in_stock:
            self.notify(f"{product.name} is out of stock.", severity="warning")
            return

        if await self.state.cart.add(product) is None:
            self.notify(f"Could not add {product.name} to cart.", severity="error")
            return
        self.notify(f"Added {product.name} to cart.")
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True, group="product-form")
    async def handle_new_product(self) -> None:
        draft = await self.app.push_screen_wait(ProductFormModal(self._categories))
        if draft is None:
            return
        try:
            await self.api.create_product(self.state.session.token, draft)
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return
        self.notify(f"Product {draft.name} added.")
        self.load_products(self._selected_category())

    @on(Button.Pressed, "#btn-edit")
    @work(exclusive=True, group="product-form")
    async def handle_edit_product(self) -> None:
        product = self._selected_product()
        if product is None:
            return
        if not can_manage_product(product, self.state.session.current):
            self.notify("You can only edit your own products.", severity="warning")
            return

        draft = await self.app.push_screen_wait(
            ProductFormModal(self._categories, product)
        )
        if draft is None:
            return
        try:
            await self.api.update_product(self.state.session.token, product.id, draft)
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return
        self.notify("Product updated successfully.")
        self.load_products(self._selected_category())

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="product-form")
    async def handle_delete_product(self) -> None:
        product = self._selected_product()
        if product is None:
            return
        if not can_manage_product(product, self.state.session.current):
            self.notify("You can only delete your own products.", severity="warning")
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                f"Are you sure you want to delete {product.name}?",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        try:
            await self.api.delete_product(self.state.session.token, product.id)
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return
        self.notify("Product deleted.")
        self.load_products(self._selected_category())
