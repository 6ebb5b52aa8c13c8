# src/services/trading_service/app/services/trading_service.py
import logging
from typing import Optional

from trading_common.database_models import Order, OrderSide
from trading_common.exceptions import TradingError
from trading_common.monitoring import observe_order
from trading_common.transactions import IsolationLevel, TransactionManager

from ..dtos.order_dto import OrderRequest
from .buying_power_service import BuyingPowerService
from .inventory_service import InventoryService
from .market_data_service import MarketDataService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class TradingService:
    """
    Coordinates order submission and execution across the order store and the two
    ledgers.

    Submission only verifies that the portfolio could cover the order; nothing is
    reserved until execution. Execution runs in one SERIALIZABLE transaction that
    the ledger and order-store scopes join, so a rejected ledger step rolls back
    every change staged before it and the order stays CREATED.
    """

    def __init__(
        self,
        transactions: TransactionManager,
        market_data: Optional[MarketDataService] = None,
        order_service: Optional[OrderService] = None,
        buying_power_service: Optional[BuyingPowerService] = None,
        inventory_service: Optional[InventoryService] = None,
    ):
        self.transactions = transactions
        self.market_data = market_data or MarketDataService()
        self.order_service = order_service or OrderService(transactions)
        self.buying_power_service = buying_power_service or BuyingPowerService(transactions)
        self.inventory_service = inventory_service or InventoryService(transactions)

    async def create_order(self, request: OrderRequest) -> Order:
        logger.info(f"Trying to create {request.side.value} order for {request.portfolio_id} portfolio")
        try:
            price = self.market_data.get_price(request.instrument_id)
            async with self.transactions.transaction(IsolationLevel.READ_COMMITTED):
                if request.side is OrderSide.BUY:
                    required = price * request.quantity
                    await self.buying_power_service.verify_sufficient(request.portfolio_id, required)
                else:
                    await self.inventory_service.get_and_verify(
                        request.portfolio_id, request.instrument_id, request.quantity
                    )
                order = await self.order_service.create(
                    portfolio_id=request.portfolio_id,
                    instrument_id=request.instrument_id,
                    side=request.side,
                    quantity=request.quantity,
                    price=price,
                )
        except TradingError as exc:
            observe_order("create", request.side.value, exc.code.value)
            raise
        observe_order("create", request.side.value, "success")
        return order

    async def get_order(self, order_id: int) -> Order:
        logger.info(f"Trying to look for {order_id} order")
        return await self.order_service.get(order_id)

    async def execute_order(self, order_id: int) -> Order:
        side = "UNKNOWN"
        try:
            async with self.transactions.transaction(IsolationLevel.SERIALIZABLE):
                order = await self.order_service.get_for_execution(order_id)
                side = order.side
                logger.info(f"Trying to execute {order.side} order with id {order_id}")
                if order.side == OrderSide.BUY.value:
                    await self._execute_buy(order)
                else:
                    await self._execute_sell(order)
                order = await self.order_service.finalize_execution(order)
        except TradingError as exc:
            observe_order("execute", side, exc.code.value)
            raise
        observe_order("execute", side, "success")
        return order

    async def cancel_order(self, order_id: int) -> Order:
        logger.info(f"Trying to cancel {order_id} order")
        order = await self.order_service.cancel(order_id)
        observe_order("cancel", order.side, "success")
        return order

    async def _execute_buy(self, order: Order) -> None:
        total_cost = order.price * order.quantity
        await self.buying_power_service.deduct(order.portfolio_id, total_cost)
        await self.inventory_service.add(
            order.portfolio_id, order.instrument_id, order.quantity, order.price
        )

    async def _execute_sell(self, order: Order) -> None:
        total_proceeds = order.price * order.quantity
        await self.inventory_service.remove(order.portfolio_id, order.instrument_id, order.quantity)
        await self.buying_power_service.add(order.portfolio_id, total_proceeds)
