from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Hashable, List, Mapping, Optional

import aiosqlite

from db.kv import LocalStorage
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

# fields with a dedicated attribute on LineItem; anything else rides in extra
_CORE_FIELDS = ("id", "name", "price", "unit", "image_url", "quantity")


def _to_price(val) -> Decimal:
    try:
        price = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise ValueError(f"invalid price {val!r}")
    if not price.is_finite() or price < 0:
        raise ValueError(f"invalid price {val!r}")
    return price


def _is_item_id(val) -> bool:
    return not isinstance(val, bool) and isinstance(val, (int, str)) and val != ""


def _product_fields(product: Any) -> Dict[str, Any]:
    if isinstance(product, Mapping):
        return dict(product)
    if hasattr(product, "to_dict"):
        return product.to_dict()
    return dataclasses.asdict(product)


@dataclass(frozen=True)
class LineItem:
    id: Hashable
    name: str
    price: Decimal
    unit: str = ""
    image_url: str = ""
    quantity: int = 1
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_record(cls, data: Mapping[str, Any], quantity: Optional[int] = None) -> "LineItem":
        """
        Build a line item from a product dict or a persisted cart entry.
        Raises ValueError when the id, name, price or quantity is unusable.
        """
        if not _is_item_id(data.get("id")):
            raise ValueError(f"invalid line item id {data.get('id')!r}")
        qty = data.get("quantity") if quantity is None else quantity
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValueError(f"invalid quantity {qty!r}")

        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            price=_to_price(data.get("price")),
            unit=str(data.get("unit") or ""),
            image_url=str(data.get("image_url") or ""),
            quantity=qty,
            extra={k: v for k, v in data.items() if k not in _CORE_FIELDS},
        )

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.extra)
        record.update(
            id=self.id,
            name=self.name,
            price=float(self.price),
            unit=self.unit,
            image_url=self.image_url,
            quantity=self.quantity,
        )
        return record


class CartStore:
    """
    Items the user intends to buy, keyed by product id in insertion order.

    Independent of the login state. Invalid input never raises: it either
    does nothing or is clamped. Every mutating call persists once.
    """

    def __init__(self, storage: Optional[LocalStorage] = None, key: str = config.CART_KEY):
        self._storage = storage or LocalStorage()
        self._key = key
        self._items: Dict[Hashable, LineItem] = {}

    def items(self) -> List[LineItem]:
        return list(self._items.values())

    def get(self, product_id: Hashable) -> Optional[LineItem]:
        if not _is_item_id(product_id):
            return None
        return self._items.get(product_id)

    def count(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def total(self) -> Decimal:
        return sum((item.line_total for item in self._items.values()), Decimal("0"))

    async def restore(self) -> List[LineItem]:
        self._items = {}
        try:
            raw = await self._storage.get_item(self._key)
        except aiosqlite.Error as e:
            _logger.error(f"Local storage unreadable, starting with an empty cart: {e}")
            return []
        if raw is None:
            return []

        try:
            records = json.loads(raw)
        except (ValueError, RecursionError) as e:
            _logger.warning(f"Discarding malformed cart record: {e}")
            await self._storage.remove_item(self._key)
            return []
        if not isinstance(records, list):
            _logger.warning("Discarding cart record that is not a list")
            await self._storage.remove_item(self._key)
            return []

        for record in records:
            try:
                item = LineItem.from_record(record)
            except (ValueError, TypeError, AttributeError) as e:
                _logger.warning(f"Dropping malformed cart entry: {e}")
                continue
            if item.id in self._items:
                # merge duplicates written by older clients
                prev = self._items[item.id]
                item = dataclasses.replace(prev, quantity=prev.quantity + item.quantity)
            self._items[item.id] = item

        _logger.debug(f"Restored cart with {len(self._items)} items")
        return self.items()

    async def add(self, product: Any, quantity: int = 1) -> Optional[LineItem]:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            return None

        fields = _product_fields(product)
        if not _is_item_id(fields.get("id")):
            _logger.warning(f"Not adding product without a usable id: {fields.get('id')!r}")
            return None
        existing = self._items.get(fields["id"])
        if existing:
            item = dataclasses.replace(existing, quantity=existing.quantity + quantity)
        else:
            try:
                item = LineItem.from_record(fields, quantity=quantity)
            except (ValueError, TypeError) as e:
                _logger.warning(f"Not adding product to cart: {e}")
                return None

        self._items[item.id] = item
        await self._persist()
        return item

    async def set_quantity(self, product_id: Hashable, quantity: int) -> Optional[LineItem]:
        """
        Zero or less removes the line; positive values are floored at 1.
        Unknown ids are ignored.
        """
        existing = self.get(product_id)
        if existing is None:
            return None

        try:
            quantity = int(quantity)
        except (TypeError, ValueError, OverflowError):
            return existing

        if quantity <= 0:
            del self._items[product_id]
            item = None
        else:
            item = dataclasses.replace(existing, quantity=max(1, quantity))
            self._items[product_id] = item

        await self._persist()
        return item

    async def remove(self, product_id: Hashable) -> None:
        if not _is_item_id(product_id):
            return
        self._items.pop(product_id, None)
        await self._persist()

    async def clear(self) -> None:
        self._items = {}
        await self._persist()

    async def _persist(self) -> None:
        records = [item.to_record() for item in self._items.values()]
        await self._storage.set_item(self._key, json.dumps(records))
