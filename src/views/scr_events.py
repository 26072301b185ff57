from textual.app import ComposeResult
from textual.widgets import MarkdownViewer

from views.base_screen import BaseScreen

# (id, name, description, date)
COMMUNITY_EVENTS = [
    (
        "e1",
        "Spring Planting Workshop",
        "Learn best practices for spring planting and soil health.",
        "2025-04-15",
    ),
    (
        "e2",
        "Farm-to-Table Dinner Gala",
        "Enjoy a multi-course meal prepared with local, seasonal ingredients.",
        "2025-05-20",
    ),
    (
        "e3",
        "Sustainable Farming Expo",
        "Explore innovations in eco-friendly agriculture and connect with experts.",
        "2025-06-10",
    ),
]


def events_markdown() -> str:
    if not COMMUNITY_EVENTS:
        return "### Community Events\n\nNo upcoming events."
    parts = [
        "### Community Events\n\n"
        "Seasonal festivals, cooking demonstrations, sustainable farming "
        "workshops and farmer meetups, online and in person.\n"
    ]
    for _, name, descr, day in sorted(COMMUNITY_EVENTS, key=lambda e: e[3]):
        parts.append(f"#### {name}\n\n**Date:** {day}  \n{descr}\n")
    return "\n".join(parts)


class EventsScreen(BaseScreen):
    VIEW_NAME = "events"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield MarkdownViewer(events_markdown(), show_table_of_contents=False)
