from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from trading_common.database_models import OrderSide, OrderStatus


class OrderRequest(BaseModel):
    """
    Request body for submitting a new BUY or SELL order.
    """

    portfolio_id: str = Field(
        ..., min_length=1, description="Portfolio placing the order.", examples=["PF-001"]
    )
    instrument_id: str = Field(
        ..., min_length=1, description="ISIN of the instrument to trade.", examples=["US0378331005"]
    )
    side: OrderSide = Field(..., description="Order direction.", examples=["BUY"])
    quantity: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Quantity to trade, at most two fractional digits.",
        examples=["10.00"],
    )

    model_config = ConfigDict(str_strip_whitespace=True)


class OrderRecord(BaseModel):
    """
    Represents a single order for API responses.
    """

    id: int = Field(..., description="Generated order identifier.", examples=[1])
    portfolio_id: str = Field(..., description="Portfolio owning the order.", examples=["PF-001"])
    instrument_id: str = Field(..., description="ISIN of the traded instrument.", examples=["US0378331005"])
    side: OrderSide = Field(..., description="Order direction.", examples=["BUY"])
    status: OrderStatus = Field(..., description="Order lifecycle status.", examples=["CREATED"])
    quantity: Decimal = Field(..., description="Ordered quantity.", examples=["10.00"])
    price: Decimal = Field(
        ..., description="Trade price captured when the order was created.", examples=["200.00"]
    )
    created_at: Optional[datetime] = Field(None, description="Creation timestamp.")
    updated_at: Optional[datetime] = Field(None, description="Last status change timestamp.")

    model_config = ConfigDict(from_attributes=True)
