from __future__ import annotations

from typing import List, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, Select

from api.models import Category, Product, ProductDraft
from utils.pure import parse_product_form


class ProductFormModal(ModalScreen[Optional[ProductDraft]]):
    """
    Add a new product, or edit `product` when given.
    Dismisses with the validated draft, or None when cancelled.
    """

    def __init__(self, categories: List[Category], product: Optional[Product] = None):
        super().__init__()
        self._categories = categories
        self._product = product

    def compose(self) -> ComposeResult:
        p = self._product
        with VerticalScroll(id="div-product-form"):
            yield Label(
                f"Edit Product: {p.name}" if p else "Add New Product",
                id="label-form-title",
            )
            yield Label("", id="label-form-error", classes="hidden error")
            yield Label("Product Name")
            yield Input(
                p.name if p else "", placeholder="e.g., Organic Tomatoes", id="input-name"
            )
            yield Label("Description")
            yield Input(
                p.description if p else "",
                placeholder="Freshly picked, juicy and sweet...",
                id="input-description",
            )
            with Horizontal(classes="form-row"):
                with Vertical():
                    yield Label("Price ($)")
                    yield Input(
                        f"{p.price:.2f}" if p else "",
                        placeholder="e.g., 3.50",
                        type="number",
                        validators=[Number(minimum=0.0)],
                        id="input-price",
                    )
                with Vertical():
                    yield Label("Unit")
                    yield Input(
                        p.unit if p else "", placeholder="e.g., kg, dozen, lb", id="input-unit"
                    )
                with Vertical():
                    yield Label("Stock")
                    yield Input(
                        str(p.stock_quantity) if p else "0",
                        placeholder="e.g., 100",
                        type="integer",
                        validators=[Number(minimum=0)],
                        id="input-stock",
                    )
            yield Label("Category")
            yield Select(
                [(c.name, c.id) for c in self._categories],
                prompt="Select a Category",
                id="select-form-category",
            )
            yield Label("Image URL (optional)")
            yield Input(
                p.image_url if p else "",
                placeholder="e.g., https://example.com/tomato.jpg",
                id="input-image-url",
            )
            with Horizontal(id="hort-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update Product" if p else "Add Product",
                    id="btn-save",
                    variant="primary",
                )

    def on_mount(self) -> None:
        if self._product and self._product.category_id is not None:
            known = {c.id for c in self._categories}
            if self._product.category_id in known:
                self.query_one("#select-form-category", Select).value = (
                    self._product.category_id
                )
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        category = self.query_one("#select-form-category", Select)
        draft, error = parse_product_form(
            name=self.query_one("#input-name", Input).value,
            description=self.query_one("#input-description", Input).value,
            price=self.query_one("#input-price", Input).value,
            unit=self.query_one("#input-unit", Input).value,
            category_id=None if category.is_blank() else category.value,
            stock_quantity=self.query_one("#input-stock", Input).value,
            image_url=self.query_one("#input-image-url", Input).value,
        )
        label = self.query_one("#label-form-error", Label)
        if error:
            label.update(error)
            label.remove_class("hidden")
            self.notify(error, severity="error")
            return

        self.dismiss(draft)
