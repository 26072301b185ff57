from typing import Any, Dict, Optional

from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user confirmed logging out
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired after any cart mutation (add, quantity change, remove, clear, checkout).
    Refreshes the cart badge in the sidebar and the cart screen itself.

    If posted from a modal, post at App level
    """

    bubble = True


class NavigateMessage(Message):
    """
    Request to show another view. Handled by the app, which replaces the
    current screen. params belong to the destination view only.
    """

    bubble = True

    def __init__(self, view: str, params: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self.view = view
        self.params = params or {}
