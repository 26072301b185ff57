from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Tuple

ViewName = Literal[
    "home",
    "products",
    "product_detail",
    "services",
    "events",
    "dashboard",
    "cart",
    "checkout",
    "auth",
]

VIEW_NAMES: Tuple[str, ...] = (
    "home",
    "products",
    "product_detail",
    "services",
    "events",
    "dashboard",
    "cart",
    "checkout",
    "auth",
)

DEFAULT_VIEW = "home"
AUTH_VIEW = "auth"


class Navigator:
    """
    Current view name plus the parameters that belong to it.

    navigate() swaps both at once, so parameters never outlive the view
    they were given for. Names outside VIEW_NAMES land on the home view.
    """

    def __init__(self, view: str = DEFAULT_VIEW):
        self._view: str = view if view in VIEW_NAMES else DEFAULT_VIEW
        self._params: Dict[str, Any] = {}

    @property
    def view(self) -> str:
        return self._view

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._params)

    def navigate(self, view: str, params: Optional[Dict[str, Any]] = None) -> str:
        self._view, self._params = (
            view if view in VIEW_NAMES else DEFAULT_VIEW,
            dict(params or {}),
        )
        return self._view

    def resolve(self, has_session: bool) -> str:
        """Effective view to render; without a session everything shows auth."""
        if not has_session and self._view != AUTH_VIEW:
            return AUTH_VIEW
        return self._view
