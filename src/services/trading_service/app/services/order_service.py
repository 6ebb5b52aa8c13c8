# src/services/trading_service/app/services/order_service.py
import logging
from decimal import Decimal
from typing import List

from trading_common.database_models import Order, OrderSide, OrderStatus
from trading_common.exceptions import TradingErrorCode
from trading_common.precision_policy import quantize_price, quantize_quantity
from trading_common.transactions import IsolationLevel, TransactionManager

from ..repositories.order_repository import OrderRepository
from .rejections import reject

logger = logging.getLogger(__name__)


class OrderService:
    """
    Owns order records and their status transitions.

    CREATED is the only non-terminal status: an order moves to EXECUTED or
    CANCELLED exactly once and never leaves either.
    """

    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    async def create(
        self,
        portfolio_id: str,
        instrument_id: str,
        side: OrderSide,
        quantity: Decimal,
        price: Decimal,
    ) -> Order:
        order = Order(
            portfolio_id=portfolio_id,
            instrument_id=instrument_id,
            status=OrderStatus.CREATED.value,
            side=OrderSide(side).value,
            quantity=quantize_quantity(quantity),
            price=quantize_price(price),
        )
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            order = await OrderRepository(db).save(order)
        logger.info(f"Created {order.side} order {order.id} for portfolio {portfolio_id}")
        return order

    async def get(self, order_id: int) -> Order:
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await self._get(OrderRepository(db), order_id)

    async def get_for_execution(self, order_id: int) -> Order:
        """
        Retrieves an order that is about to be executed, locking it for the rest of
        the surrounding transaction. Raises INVALID_STATE unless it is CREATED.
        """
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            order = await self._get(OrderRepository(db), order_id, for_update=True)
            self._ensure_created(order, "executed")
            return order

    async def cancel(self, order_id: int) -> Order:
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            repo = OrderRepository(db)
            order = await self._get(repo, order_id, for_update=True)
            self._ensure_created(order, "cancelled")
            order.status = OrderStatus.CANCELLED.value
            return await repo.save(order)

    async def finalize_execution(self, order: Order) -> Order:
        """Marks an order EXECUTED. The caller has already applied its ledger effects."""
        logger.info(f"Trying to finalize {order.id} order")
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            order.status = OrderStatus.EXECUTED.value
            return await OrderRepository(db).save(order)

    async def list_pending(self, portfolio_id: str) -> List[Order]:
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await OrderRepository(db).list_by_portfolio_and_status(
                portfolio_id, OrderStatus.CREATED.value
            )

    @staticmethod
    async def _get(repo: OrderRepository, order_id: int, for_update: bool = False) -> Order:
        order = await repo.get_by_id(order_id, for_update=for_update)
        if order is None:
            raise reject(
                logger,
                TradingErrorCode.ORDER_NOT_FOUND,
                f"Order {order_id} not found",
                order_id=order_id,
            )
        return order

    @staticmethod
    def _ensure_created(order: Order, action: str) -> None:
        if OrderStatus(order.status).is_terminal:
            raise reject(
                logger,
                TradingErrorCode.INVALID_STATE,
                f"Order {order.id} cannot be {action} because it's in {order.status} status",
                order_id=order.id,
                status=order.status,
            )
