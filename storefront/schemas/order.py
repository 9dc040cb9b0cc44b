from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
from typing import Optional
from datetime import datetime


ORDER_STATUS_PENDING = "Pending"


class OrderDraft(BaseModel):
    """Payload for POST /orders. Built right before submission, never stored."""

    customer_id: int
    total_price: Decimal
    status: str = ORDER_STATUS_PENDING

    def to_payload(self) -> dict:
        return {
            "CustomerID": self.customer_id,
            "TotalPrice": float(self.total_price),
            "Status": self.status
        }


class OrderSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="OrderID")
    order_date: Optional[datetime] = Field(default=None, alias="OrderDate")
    total_price: Optional[Decimal] = Field(default=None, alias="TotalPrice")
    status: Optional[str] = Field(default=None, alias="Status")
