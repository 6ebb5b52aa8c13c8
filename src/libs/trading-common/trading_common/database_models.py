# src/libs/trading-common/trading_common/database_models.py
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, Numeric, String

from .db_base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.CREATED


class BuyingPower(Base):
    __tablename__ = 'buying_power'

    portfolio_id = Column(String, primary_key=True)
    amount = Column(Numeric(18, 2), nullable=False)
    # Timestamps are filled in Python so flushed rows never carry expired attributes.
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_buying_power_amount_non_negative"),
    )


class InventoryPosition(Base):
    __tablename__ = 'inventory_positions'

    portfolio_id = Column(String, primary_key=True)
    instrument_id = Column(String, primary_key=True)
    quantity = Column(Numeric(18, 2), nullable=False)
    average_price = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_positions_quantity_non_negative"),
    )


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(String, index=True, nullable=False)
    instrument_id = Column(String, nullable=False)
    status = Column(String, nullable=False)
    side = Column(String, nullable=False)
    quantity = Column(Numeric(18, 2), nullable=False)
    price = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index('ix_orders_portfolio_status', 'portfolio_id', 'status'),
    )
