from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Resize
from textual.screen import ModalScreen
from textual.widgets import Label


class ResizeScreenPromptModal(ModalScreen[None]):
    """
    Covers the UI while the terminal is smaller than the storefront needs.
    Goes away by itself once the terminal is large enough.
    """

    def __init__(self, min_width: int, min_height: int) -> None:
        super().__init__()
        self.min_width = min_width
        self.min_height = min_height

    def compose(self) -> ComposeResult:
        with Container(id="div-resize"):
            yield Label(
                f"Please enlarge the terminal to at least "
                f"{self.min_width}x{self.min_height}",
                id="prompt",
            )
            yield Label("", id="label-current-size")

    def on_resize(self, event: Resize) -> None:
        if (
            event.size.width >= self.min_width
            and event.size.height >= self.min_height
        ):
            self.dismiss()
            return
        self.query_one("#label-current-size", Label).update(
            f"current: {event.size.width}x{event.size.height}"
        )
