# src/services/trading_service/app/services/portfolio_view_service.py
import logging
from typing import Optional

from trading_common.transactions import IsolationLevel, TransactionManager

from ..dtos.portfolio_dto import HoldingRecord, PendingOrderRecord, PortfolioView
from .buying_power_service import BuyingPowerService
from .inventory_service import InventoryService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class PortfolioViewService:
    """
    Assembles the read-only portfolio snapshot.
    """

    def __init__(
        self,
        transactions: TransactionManager,
        buying_power_service: Optional[BuyingPowerService] = None,
        inventory_service: Optional[InventoryService] = None,
        order_service: Optional[OrderService] = None,
    ):
        self.transactions = transactions
        self.buying_power_service = buying_power_service or BuyingPowerService(transactions)
        self.inventory_service = inventory_service or InventoryService(transactions)
        self.order_service = order_service or OrderService(transactions)

    async def get_portfolio(self, portfolio_id: str) -> PortfolioView:
        logger.info(f"Fetching portfolio view for {portfolio_id}")
        # One transaction so cash, holdings and pending orders come from the same snapshot.
        async with self.transactions.transaction(IsolationLevel.REPEATABLE_READ):
            buying_power = await self.buying_power_service.get_buying_power(portfolio_id)
            positions = await self.inventory_service.list_for_portfolio(portfolio_id)
            pending = await self.order_service.list_pending(portfolio_id)

        return PortfolioView(
            portfolio_id=portfolio_id,
            available_cash=buying_power.amount,
            holdings=[HoldingRecord.model_validate(position) for position in positions],
            pending_orders=[
                PendingOrderRecord(
                    order_id=order.id,
                    instrument_id=order.instrument_id,
                    side=order.side,
                    quantity=order.quantity,
                    price=order.price,
                )
                for order in pending
            ],
        )
