from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from storefront.schemas.cart import CartLine, CartView

MINOR_UNIT = Decimal("0.01")


def cart_total(lines: Iterable[CartLine]) -> Decimal:
    total = Decimal("0.00")
    for line in lines:
        total += line.unit_price * line.quantity
    return total.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def build_cart_view(lines: List[CartLine]) -> CartView:
    """The total is always derived from the rows being shown."""
    return CartView(
        lines=list(lines),
        total=cart_total(lines),
        item_count=len(lines)
    )
