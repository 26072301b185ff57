from __future__ import annotations

from dataclasses import dataclass, field

from db.kv import LocalStorage
from state.cart import CartStore
from state.navigation import Navigator
from state.session import SessionStore


@dataclass
class AppState:
    """
    Client-side state handed to every screen.

    Fields:
      - session: who is logged in (persisted)
      - cart: line items to be ordered (persisted)
      - nav: current view and its params (memory only)
    """

    session: SessionStore = field(default_factory=SessionStore)
    cart: CartStore = field(default_factory=CartStore)
    nav: Navigator = field(default_factory=Navigator)

    @classmethod
    def with_storage(cls, storage: LocalStorage) -> "AppState":
        return cls(session=SessionStore(storage), cart=CartStore(storage))

    async def restore(self) -> None:
        """Rehydrate both persisted stores. Malformed records end up empty."""
        await self.session.restore()
        await self.cart.restore()
