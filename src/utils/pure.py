from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Literal, Optional, Tuple, Union

from api.models import Product, ProductDraft
from state.session import Session


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [list(map(str, row)) for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(map(str, row)) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def format_money(amount: Union[Decimal, float, int]) -> str:
    return f"${Decimal(str(amount)):.2f}"


def filter_products(products: Iterable[Product], term: str) -> List[Product]:
    """
    Case-insensitive substring match over name, description, category name
    and farmer username. A blank term keeps everything.
    """
    term = (term or "").strip().lower()
    if not term:
        return list(products)
    return [
        p
        for p in products
        if term in p.name.lower()
        or term in p.description.lower()
        or term in p.category_name.lower()
        or term in p.farmer_username.lower()
    ]


def managed_products(products: Iterable[Product], session: Session) -> List[Product]:
    """Products a farmer owns, or every product for an admin."""
    if session.role == "admin":
        return list(products)
    if session.role == "farmer":
        return [p for p in products if str(p.farmer_id) == str(session.id)]
    return []


def can_manage_product(product: Product, session: Optional[Session]) -> bool:
    if session is None:
        return False
    if session.role == "admin":
        return True
    return session.role == "farmer" and str(product.farmer_id) == str(session.id)


# ---------------------------
# Form validation
# each returns an error message, or None when the input is acceptable
# ---------------------------


def validate_login(email: str, password: str) -> Optional[str]:
    if not email.strip() or not password:
        return "Email and password are required."
    return None


def validate_registration(
    username: str, email: str, password: str, confirm_password: str
) -> Optional[str]:
    if not username.strip() or not email.strip() or not password:
        return "Make sure all inputs are filled."
    if password != confirm_password:
        return "Passwords do not match!"
    return None


def parse_product_form(
    name: str,
    description: str,
    price: str,
    unit: str,
    category_id: Any,
    stock_quantity: str,
    image_url: str = "",
) -> Tuple[Optional[ProductDraft], Optional[str]]:
    """
    Turn raw product form input into a draft.
    Returns (draft, None) on success and (None, message) otherwise.
    """
    if (
        not name.strip()
        or not price.strip()
        or not unit.strip()
        or category_id in (None, "")
        or not stock_quantity.strip()
    ):
        return None, "All product fields are required."

    try:
        price_val = Decimal(price.strip())
    except InvalidOperation:
        return None, "Price must be a number."
    if not price_val.is_finite() or price_val < 0:
        return None, "Price must be a non-negative number."

    try:
        stock_val = int(stock_quantity.strip())
    except ValueError:
        return None, "Stock must be a whole number."
    if stock_val < 0:
        return None, "Stock cannot be negative."

    return (
        ProductDraft(
            name=name.strip(),
            description=description.strip(),
            price=price_val,
            unit=unit.strip(),
            category_id=category_id,
            stock_quantity=stock_val,
            image_url=image_url.strip(),
        ),
        None,
    )


def validate_service(name: str, description: str, price: str) -> Optional[str]:
    if not name.strip() or not description.strip() or not price.strip():
        return "Service name, description, and price are required."
    try:
        price_val = Decimal(price.strip())
    except InvalidOperation:
        return "Price must be a number."
    if not price_val.is_finite() or price_val < 0:
        return "Price must be a non-negative number."
    return None


def validate_checkout(
    shipping_address: str, payment_method: Optional[str], cart_empty: bool
) -> Optional[str]:
    if not shipping_address.strip() or not (payment_method or "").strip():
        return "Shipping address and payment method are required."
    if cart_empty:
        return "Your cart is empty. Cannot place an empty order."
    return None
