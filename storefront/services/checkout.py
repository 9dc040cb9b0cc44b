"""
Checkout: turn the current cart into an order, then empty the cart.

The two remote mutations run strictly in sequence. The cart is only cleared
after the order has been created, and a created order is never rolled back.
A failed clear therefore leaves a placed order next to a stale cart, which is
reported as CART_CLEAR_FAILED rather than as a plain failure.
"""
import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from storefront.core.api_client import ShopAPIClient, BackendError
from storefront.core.config import settings
from storefront.schemas.cart import CartLine
from storefront.schemas.order import OrderDraft
from storefront.services.cart import cart_total

logger = logging.getLogger(__name__)


class CheckoutStatus(str, enum.Enum):
    PLACED = "PLACED"
    EMPTY_CART = "EMPTY_CART"
    ORDER_CREATION_FAILED = "ORDER_CREATION_FAILED"
    CART_CLEAR_FAILED = "CART_CLEAR_FAILED"


@dataclass
class CheckoutResult:
    status: CheckoutStatus
    order_id: Optional[int] = None
    lines: List[CartLine] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == CheckoutStatus.PLACED

    @property
    def redirect_url(self) -> Optional[str]:
        if not self.ok:
            return None
        return f"/orders?id={self.order_id}"


def resolve_customer_id(lines: List[CartLine], customer_id: Optional[int] = None) -> int:
    """Session customer first, then the first cart line, then the configured default."""
    if customer_id is not None:
        return customer_id
    if lines and lines[0].customer_id is not None:
        return lines[0].customer_id
    return settings.DEFAULT_CUSTOMER_ID


async def checkout(
    client: ShopAPIClient,
    cart_lines: List[CartLine],
    token: str,
    customer_id: Optional[int] = None,
    idempotency_key: Optional[str] = None
) -> CheckoutResult:
    if not cart_lines:
        return CheckoutResult(status=CheckoutStatus.EMPTY_CART, message="Your cart is empty!")

    draft = OrderDraft(
        customer_id=resolve_customer_id(cart_lines, customer_id),
        total_price=cart_total(cart_lines)
    )
    idempotency_key = idempotency_key or uuid.uuid4().hex

    try:
        order_id = await client.create_order(token, draft, idempotency_key=idempotency_key)
    except BackendError as e:
        logger.error(f"Checkout aborted, order not created: {e.message}")
        return CheckoutResult(
            status=CheckoutStatus.ORDER_CREATION_FAILED,
            lines=list(cart_lines),
            message="Failed to create order."
        )

    try:
        await client.clear_cart(token)
    except BackendError as e:
        logger.warning(f"Order {order_id} created but cart not cleared: {e.message}")
        return CheckoutResult(
            status=CheckoutStatus.CART_CLEAR_FAILED,
            order_id=order_id,
            lines=list(cart_lines),
            message=f"Order {order_id} was placed, but the cart could not be cleared."
        )

    logger.info(f"Checkout complete: order {order_id}, total {draft.total_price}")
    return CheckoutResult(
        status=CheckoutStatus.PLACED,
        order_id=order_id,
        message=f"Order placed successfully! Order ID: {order_id}"
    )
