from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
from typing import Optional
from datetime import datetime


class PaymentDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_id: int = Field(alias="PaymentID")
    order_id: int = Field(alias="OrderID")
    payment_method: Optional[str] = Field(default=None, alias="PaymentMethod")
    amount: Decimal = Field(alias="Amount")
    payment_date: Optional[datetime] = Field(default=None, alias="PaymentDate")
    status: str = Field(alias="Status")
