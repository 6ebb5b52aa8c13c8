from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from trading_common.database_models import OrderSide


class HoldingRecord(BaseModel):
    instrument_id: str = Field(..., description="ISIN of the held instrument.", examples=["US0378331005"])
    quantity: Decimal = Field(..., description="Quantity held.", examples=["10.00"])
    average_price: Decimal = Field(
        ..., description="Quantity-weighted average purchase price.", examples=["200.00"]
    )

    model_config = ConfigDict(from_attributes=True)


class PendingOrderRecord(BaseModel):
    order_id: int = Field(..., description="Order identifier.", examples=[7])
    instrument_id: str = Field(..., description="ISIN of the traded instrument.", examples=["US67066G1040"])
    side: OrderSide = Field(..., description="Order direction.", examples=["SELL"])
    quantity: Decimal = Field(..., description="Ordered quantity.", examples=["5.00"])
    price: Decimal = Field(..., description="Price captured at creation.", examples=["100.00"])


class PortfolioView(BaseModel):
    """
    Point-in-time snapshot of a portfolio: cash, holdings and orders still
    awaiting execution.
    """

    portfolio_id: str = Field(..., description="Portfolio identifier.", examples=["PF-001"])
    available_cash: Decimal = Field(..., description="Current buying power.", examples=["4000.00"])
    holdings: List[HoldingRecord] = Field(..., description="Inventory positions of the portfolio.")
    pending_orders: List[PendingOrderRecord] = Field(
        ..., description="Orders in CREATED status, oldest first."
    )
