# src/services/trading_service/app/repositories/buying_power_repository.py
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from trading_common.database_models import BuyingPower
from trading_common.utils import async_timed

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class BuyingPowerRepository:
    """
    Handles database operations for the BuyingPower model, one row per portfolio.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @async_timed(repository="BuyingPowerRepository", method="get")
    async def get(self, portfolio_id: str, for_update: bool = False) -> Optional[BuyingPower]:
        """
        Retrieves the buying power row of a portfolio. With ``for_update`` the row is
        locked until the surrounding transaction ends.
        """
        stmt = select(BuyingPower).filter_by(portfolio_id=portfolio_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalars().first()

    @async_timed(repository="BuyingPowerRepository", method="insert_if_absent")
    async def insert_if_absent(self, portfolio_id: str, amount: Decimal) -> None:
        """
        Inserts a buying power row unless one already exists. Concurrent callers
        racing on the same portfolio all succeed and exactly one row survives.
        """
        dialect = self.db.bind.dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"insert-if-absent is not supported on dialect '{dialect}'")

        stmt = insert(BuyingPower).values(
            portfolio_id=portfolio_id,
            amount=amount,
        ).on_conflict_do_nothing(
            index_elements=['portfolio_id']
        )
        await self.db.execute(stmt)

    @async_timed(repository="BuyingPowerRepository", method="save")
    async def save(self, record: BuyingPower) -> BuyingPower:
        self.db.add(record)
        await self.db.flush()
        return record
