import asyncio
from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, Markdown, MarkdownViewer, Select

from api.client import ApiError
from api.models import ORDER_STATUSES, Order, Product
from utils.pure import format_money, managed_products
from views.base_screen import BaseScreen


class DashboardScreen(BaseScreen):
    """
    Role dependent overview.

    - customer: own order history with item detail
    - farmer: own products and the orders for them
    - admin: every product and every order, plus order status updates
    """

    VIEW_NAME = "dashboard"

    BINDINGS = [
        Binding("r", "reload", "Refresh", show=True),
    ]

    def __init__(self, state, api, params=None):
        super().__init__(state, api, params)
        self._orders: List[Order] = []
        self._products: List[Product] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        session = self.state.session.current
        is_staff = self.state.session.has_role("farmer", "admin")
        with Vertical(id="div-dashboard"):
            yield Markdown(
                f"### Welcome, {session.username}!\n\nRole: **{session.role.capitalize()}**"
                if session
                else "Please log in to view your dashboard.",
                id="md-welcome",
            )
            yield Label("", id="label-error", classes="hidden error")
            yield Label("Orders", id="label-orders-title")
            yield DataTable(id="table-orders")
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            if self.state.session.has_role("admin"):
                with Horizontal(id="hort-order-status"):
                    yield Select(
                        [(s.capitalize(), s) for s in ORDER_STATUSES],
                        prompt="Update Status",
                        id="select-status",
                    )
                    yield Button("Update Status", id="btn-update-status", variant="success")
            if is_staff:
                yield Label("Your Managed Products", id="label-products-title")
                yield DataTable(id="table-managed-products")
            with Horizontal(id="hort-dashboard-btns"):
                yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one("#table-orders", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        columns = ["Order", "Date", "Status", "Total", "Ship To"]
        if self.state.session.has_role("admin"):
            columns.append("Customer")
        table.add_columns(*columns)

        if self.state.session.has_role("farmer", "admin"):
            prods = self.query_one("#table-managed-products", DataTable)
            prods.cursor_type = "row"
            prods.zebra_stripes = True
            prods.add_columns("Name", "Category", "Price", "Stock")

        if self.state.session.is_authenticated:
            self.load_data()

    def action_reload(self) -> None:
        self.load_data()

    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh(self) -> None:
        self.load_data()

    @work(exclusive=True, group="dashboard")
    async def load_data(self) -> None:
        session = self.state.session.current
        if session is None:
            return
        token = session.token

        try:
            if session.role == "customer":
                self._orders = await self.api.my_orders(token)
            else:
                orders, products = await asyncio.gather(
                    self.api.all_orders(token),
                    self.api.list_products(token=token),
                )
                self._orders = orders
                self._products = managed_products(products, session)
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return

        self.show_error(None)
        self.render_orders()
        if session.role in ("farmer", "admin"):
            self.render_products()

    def render_orders(self) -> None:
        role = self.state.session.role
        title = {
            "customer": "Your Orders",
            "farmer": "Orders for Your Products",
            "admin": "All Orders",
        }.get(role, "Orders")
        self.query_one("#label-orders-title", Label).update(
            f"{title} ({len(self._orders)})"
        )

        table = self.query_one("#table-orders", DataTable)
        table.clear()
        for o in self._orders:
            row = [
                f"#{o.short_id}",
                o.order_date,
                o.status.capitalize(),
                format_money(o.total_amount),
                o.shipping_address,
            ]
            if role == "admin":
                row.append(f"{o.customer_username} ({o.customer_email})")
            table.add_row(*row)

        if self._orders:
            table.cursor_coordinate = (0, 0)
            self.render_order_detail(self._orders[0])
        else:
            self.render_order_detail(None)

    def render_products(self) -> None:
        self.query_one("#label-products-title", Label).update(
            f"Your Managed Products ({len(self._products)})"
        )
        table = self.query_one("#table-managed-products", DataTable)
        table.clear()
        table.add_rows(
            [
                (p.name, p.category_name, f"{format_money(p.price)} / {p.unit}", p.stock_label)
                for p in self._products
            ]
        )

    def _selected_order(self) -> Optional[Order]:
        table = self.query_one("#table-orders", DataTable)
        if table.row_count == 0 or table.cursor_row is None:
            return None
        if table.cursor_row >= len(self._orders):
            return None
        return self._orders[table.cursor_row]

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self) -> None:
        order = self._selected_order()
        self.render_order_detail(order)
        if order and self.state.session.has_role("admin"):
            select = self.query_one("#select-status", Select)
            if order.status in ORDER_STATUSES:
                select.value = order.status

    def render_order_detail(self, order: Optional[Order]) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if not order:
            viewer.document.update("No orders found.")
            return

        header = (
            f"### Order #{order.short_id}\n"
            f"Date: {order.order_date}  \n"
            f"Status: {order.status.capitalize()}  \n"
            f"Ship To: {order.shipping_address}\n\n"
        )
        rows = [
            "| Product | Qty | Unit Price | Line Total |",
            "|:---|---:|---:|---:|",
        ]
        for item in order.items:
            rows.append(
                f"| {item.product_name} | {item.quantity} | {format_money(item.price)} "
                f"| {format_money(item.price * item.quantity)} |"
            )
        footer = f"\n\n**Total:** {format_money(order.total_amount)}"
        viewer.document.update(header + "\n".join(rows) + footer)

    @on(Button.Pressed, "#btn-update-status")
    @work(exclusive=True, group="status")
    async def handle_update_status(self) -> None:
        order = self._selected_order()
        select = self.query_one("#select-status", Select)
        if order is None or select.is_blank():
            self.notify("Select an order and a status first.", severity="warning")
            return
        if select.value == order.status:
            self.notify("Nothing to update.", severity="warning")
            return

        try:
            await self.api.update_order_status(
                self.state.session.token, order.id, select.value
            )
        except ApiError as e:
            self.show_error(e.message)
            self.notify(e.message, severity="error")
            return

        self.notify(f"Order #{order.short_id} marked {select.value}.")
        self.load_data()
