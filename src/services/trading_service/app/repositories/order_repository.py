# src/services/trading_service/app/repositories/order_repository.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from trading_common.database_models import Order
from trading_common.utils import async_timed

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    Handles database operations for Order records.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @async_timed(repository="OrderRepository", method="get_by_id")
    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieves a single order by its generated id. With ``for_update`` the row is
        locked so that two executions or cancellations of one order serialise.
        """
        stmt = select(Order).filter_by(id=order_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalars().first()

    @async_timed(repository="OrderRepository", method="list_by_portfolio_and_status")
    async def list_by_portfolio_and_status(self, portfolio_id: str, status: str) -> List[Order]:
        stmt = (
            select(Order)
            .filter_by(portfolio_id=portfolio_id, status=status)
            .order_by(Order.id.asc())
        )
        results = await self.db.execute(stmt)
        return results.scalars().all()

    @async_timed(repository="OrderRepository", method="save")
    async def save(self, order: Order) -> Order:
        """
        Persists a new or modified order and reloads it, so callers see the stored
        values (generated id, timestamps as the database returns them).
        """
        self.db.add(order)
        await self.db.flush()
        await self.db.refresh(order)
        return order
