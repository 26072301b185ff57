# provide dataclass models for API payloads

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple, Union

Id = Union[int, str]

PAYMENT_METHODS = {
    "card": "Credit Card",
    "paypal": "PayPal",
    "m-pesa": "M-Pesa",
    "cod": "Cash on Delivery",
}

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


def _decimal(val, default: str = "0") -> Decimal:
    try:
        return Decimal(str(val if val is not None else default))
    except (InvalidOperation, ValueError):
        return Decimal(default)


def _int(val, default: int = 0) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Category:
    id: Id
    name: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Category":
        return cls(id=data["id"], name=str(data.get("name") or ""))


@dataclass(frozen=True)
class Product:
    id: Id
    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    unit: str = ""
    image_url: str = ""
    category_id: Optional[Id] = None
    category_name: str = ""
    stock_quantity: int = 0
    farmer_id: Optional[Id] = None
    farmer_username: str = ""

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def stock_label(self) -> str:
        if self.in_stock:
            return f"{self.stock_quantity} available"
        return "Out of Stock"

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            price=_decimal(data.get("price")),
            unit=str(data.get("unit") or ""),
            image_url=str(data.get("image_url") or ""),
            category_id=data.get("category_id"),
            category_name=str(data.get("category_name") or ""),
            stock_quantity=_int(data.get("stock_quantity")),
            farmer_id=data.get("farmer_id"),
            farmer_username=str(data.get("farmer_username") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready fields, as the cart persists them."""
        data = asdict(self)
        data["price"] = str(self.price)
        return data


@dataclass(frozen=True)
class ProductDraft:
    """Fields of the add/edit product form, sent as the request body."""

    name: str
    description: str
    price: Decimal
    unit: str
    category_id: Id
    stock_quantity: int
    image_url: str = ""

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "unit": self.unit,
            "image_url": self.image_url,
            "category_id": self.category_id,
            "stock_quantity": self.stock_quantity,
        }


@dataclass(frozen=True)
class OrderItem:
    product_name: str
    quantity: int
    price: Decimal
    product_id: Optional[Id] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "OrderItem":
        return cls(
            product_name=str(data.get("product_name") or ""),
            quantity=_int(data.get("quantity")),
            price=_decimal(data.get("price")),
            product_id=data.get("product_id"),
        )


@dataclass(frozen=True)
class Order:
    id: Id
    status: str
    total_amount: Decimal
    order_date: str
    shipping_address: str = ""
    payment_method: str = ""
    customer_username: str = ""
    customer_email: str = ""
    items: Tuple[OrderItem, ...] = field(default_factory=tuple)

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            status=str(data.get("status") or "pending"),
            total_amount=_decimal(data.get("total_amount")),
            order_date=str(data.get("order_date") or ""),
            shipping_address=str(data.get("shipping_address") or ""),
            payment_method=str(data.get("payment_method") or ""),
            customer_username=str(data.get("customer_username") or ""),
            customer_email=str(data.get("customer_email") or ""),
            items=tuple(OrderItem.from_json(i) for i in data.get("items") or []),
        )
