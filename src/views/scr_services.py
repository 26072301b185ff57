from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Markdown

from utils.pure import format_money, validate_service
from views.base_screen import BaseScreen


@dataclass(frozen=True)
class FarmService:
    id: str
    name: str
    description: str
    price: str
    provider_id: str
    created_at: str


# no backend endpoint for services yet; the catalog lives client side
DEFAULT_SERVICES = (
    FarmService(
        "s1",
        "Tractor Rental (Hourly)",
        "High-power tractor with operator for field preparation.",
        "75.00",
        "mockfarmer1",
        "2024-01-01T10:00:00Z",
    ),
    FarmService(
        "s2",
        "Soil Testing & Analysis",
        "Comprehensive soil nutrient analysis with recommendations.",
        "120.00",
        "mockfarmer2",
        "2024-02-01T10:00:00Z",
    ),
    FarmService(
        "s3",
        "Crop Spraying Services",
        "Professional pest and disease control for various crops.",
        "200.00",
        "mockfarmer1",
        "2024-03-01T10:00:00Z",
    ),
)


class ServiceFormModal(ModalScreen[Optional[dict]]):
    """Returns {name, description, price} or None when cancelled."""

    def compose(self) -> ComposeResult:
        with Vertical(id="div-service-form"):
            yield Label("Add New Service", id="label-form-title")
            yield Label("", id="label-form-error", classes="hidden error")
            yield Label("Service Name")
            yield Input(placeholder="e.g., Tractor Rental", id="input-service-name")
            yield Label("Description")
            yield Input(placeholder="What does it include?", id="input-service-descr")
            yield Label("Price ($)")
            yield Input(placeholder="e.g., 75.00", type="number", id="input-service-price")
            with Horizontal(id="hort-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Add Service", id="btn-save", variant="primary")

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        name = self.query_one("#input-service-name", Input).value
        descr = self.query_one("#input-service-descr", Input).value
        price = self.query_one("#input-service-price", Input).value

        error = validate_service(name, descr, price)
        if error:
            label = self.query_one("#label-form-error", Label)
            label.update(error)
            label.remove_class("hidden")
            return
        self.dismiss(
            {"name": name.strip(), "description": descr.strip(), "price": price.strip()}
        )


class ServicesScreen(BaseScreen):
    """
    Farm services marketplace. Farmers and admins can list a new service;
    listings are kept for this visit only.
    """

    VIEW_NAME = "services"

    def __init__(self, state, api, params=None):
        super().__init__(state, api, params)
        self._services: List[FarmService] = list(DEFAULT_SERVICES)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-services"):
            yield Markdown(
                "### Farm Services\n\nBook equipment, testing and expertise "
                "offered by farms in the AgriHub community."
            )
            yield DataTable(id="table-services")
            if self.state.session.has_role("farmer", "admin"):
                with Horizontal(id="hort-service-btns"):
                    yield Button("Add Service", id="btn-new-service", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Service", "Description", "Price", "Provider")
        self.render_table()

    def render_table(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (s.name, s.description, format_money(s.price), s.provider_id)
                for s in self._services
            ]
        )

    @on(Button.Pressed, "#btn-new-service")
    @work(exclusive=True)
    async def handle_new_service(self) -> None:
        data = await self.app.push_screen_wait(ServiceFormModal())
        if not data:
            return
        session = self.state.session.current
        self._services.append(
            FarmService(
                id=f"s{len(self._services) + 1}",
                provider_id=str(session.id) if session else "anonymous",
                created_at=datetime.now(timezone.utc).isoformat(),
                **data,
            )
        )
        self.render_table()
        self.notify(f"Service {data['name']} listed.")
