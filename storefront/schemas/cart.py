from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
from typing import List, Optional


class CartLine(BaseModel):
    """One row of the remote cart, as returned by GET /cart."""

    model_config = ConfigDict(populate_by_name=True)

    cart_id: int = Field(alias="CartID")
    product_id: int = Field(alias="ProductID")
    product_name: str = Field(alias="ProductName")
    unit_price: Decimal = Field(alias="Price")
    customer_id: Optional[int] = Field(default=None, alias="CustomerID")
    quantity: int = Field(alias="Quantity", gt=0)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class CartView(BaseModel):
    lines: List[CartLine]
    total: Decimal
    item_count: int
