from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, MarkdownViewer

from views.base_screen import BaseScreen

WELCOME_MD = """\
## Welcome to AgriHub!

AgriHub is a marketplace built for the farming community. Farmers list,
promote and sell their products directly to consumers, retailers and
businesses, without intermediaries.

### What Makes AgriHub Unique?

| Feature | What you get |
|:---|:---|
| Direct-to-Market Sales | Produce, dairy, grains, meat and value-added goods sold directly |
| Integrated Farm Services | Rentals, soil testing, crop spraying and on-farm experiences |
| Smart Tools for Farmers | Inventory, analytics and compliance support |
| Community and Learning | Workshops, farmer meetups and seasonal events |

### Innovative Features

- **Subscription Boxes**: weekly or monthly boxes of seasonal produce
- **Farm Services Marketplace**: book equipment and expertise from nearby farms
- **Event Booking**: reserve a place at farm tours, festivals and workshops
- **Bulk and Wholesale Sales**: volume pricing for restaurants and retailers
- **Sustainability Dashboard**: track the footprint of what you buy
"""


class HomeScreen(BaseScreen):
    VIEW_NAME = "home"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-home"):
            yield MarkdownViewer(WELCOME_MD, show_table_of_contents=False)
            with Horizontal(id="hort-home-btns"):
                yield Button("Browse Products", id="btn-products", variant="primary")
                yield Button("Farm Services", id="btn-services")
                yield Button("Events", id="btn-events")

    @on(Button.Pressed, "#btn-products")
    def handle_products(self):
        self.go("products")

    @on(Button.Pressed, "#btn-services")
    def handle_services(self):
        self.go("services")

    @on(Button.Pressed, "#btn-events")
    def handle_events(self):
        self.go("events")
