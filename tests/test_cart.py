import pytest
from decimal import Decimal

from storefront.schemas.cart import CartLine
from storefront.services.cart import cart_total, build_cart_view


def make_line(cart_id, price, quantity):
    return CartLine(
        cart_id=cart_id,
        product_id=cart_id,
        product_name=f"Product {cart_id}",
        unit_price=Decimal(price),
        customer_id=4,
        quantity=quantity
    )


def test_cart_total(cart_lines):
    assert cart_total(cart_lines) == Decimal("250.00")


def test_cart_total_empty():
    assert cart_total([]) == Decimal("0.00")


def test_cart_total_ignores_order(cart_lines):
    assert cart_total(reversed(cart_lines)) == cart_total(cart_lines)


def test_cart_total_exact_over_many_lines():
    lines = [make_line(i, "0.10", 3) for i in range(1, 1001)]

    assert cart_total(lines) == Decimal("300.00")


def test_cart_line_from_wire_row(cart_rows):
    line = CartLine.model_validate(cart_rows[0])

    assert line.cart_id == 1
    assert line.product_name == "Mug"
    assert line.unit_price == Decimal("100.00")
    assert line.subtotal == Decimal("200.00")


def test_cart_line_rejects_zero_quantity(cart_rows):
    row = {**cart_rows[0], "Quantity": 0}

    with pytest.raises(ValueError):
        CartLine.model_validate(row)


def test_cart_view_total_follows_lines(cart_lines):
    view = build_cart_view(cart_lines[1:])

    assert view.item_count == 1
    assert view.total == Decimal("50.00")
