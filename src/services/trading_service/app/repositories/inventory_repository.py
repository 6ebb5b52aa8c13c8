# src/services/trading_service/app/repositories/inventory_repository.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from trading_common.database_models import InventoryPosition
from trading_common.utils import async_timed

logger = logging.getLogger(__name__)


class InventoryRepository:
    """
    Handles database operations for InventoryPosition rows, keyed by
    (portfolio_id, instrument_id).
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @async_timed(repository="InventoryRepository", method="get")
    async def get(
        self, portfolio_id: str, instrument_id: str, for_update: bool = False
    ) -> Optional[InventoryPosition]:
        stmt = select(InventoryPosition).filter_by(
            portfolio_id=portfolio_id,
            instrument_id=instrument_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalars().first()

    @async_timed(repository="InventoryRepository", method="list_by_portfolio")
    async def list_by_portfolio(self, portfolio_id: str) -> List[InventoryPosition]:
        """Retrieves every position of a portfolio, zeroed ones included."""
        stmt = (
            select(InventoryPosition)
            .filter_by(portfolio_id=portfolio_id)
            .order_by(InventoryPosition.instrument_id.asc())
        )
        results = await self.db.execute(stmt)
        positions = results.scalars().all()
        logger.info(f"Found {len(positions)} inventory positions for portfolio {portfolio_id}.")
        return positions

    @async_timed(repository="InventoryRepository", method="save")
    async def save(self, position: InventoryPosition) -> InventoryPosition:
        self.db.add(position)
        await self.db.flush()
        return position
