# src/services/trading_service/app/services/inventory_service.py
import logging
from decimal import Decimal
from typing import List, Optional

from trading_common.database_models import InventoryPosition
from trading_common.exceptions import TradingErrorCode
from trading_common.precision_policy import ZERO, quantize_money, quantize_quantity
from trading_common.transactions import IsolationLevel, TransactionManager

from ..repositories.inventory_repository import InventoryRepository
from .rejections import reject

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Owns the security holdings of every portfolio.

    Each position tracks its quantity and a quantity-weighted average price. A
    position that is sold down to exactly zero is kept with quantity and average
    price reset to 0.00 rather than deleted.
    """

    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    async def get(self, portfolio_id: str, instrument_id: str) -> Optional[InventoryPosition]:
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await InventoryRepository(db).get(portfolio_id, instrument_id)

    async def list_for_portfolio(self, portfolio_id: str) -> List[InventoryPosition]:
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await InventoryRepository(db).list_by_portfolio(portfolio_id)

    async def get_and_verify(
        self, portfolio_id: str, instrument_id: str, quantity: Decimal
    ) -> Optional[InventoryPosition]:
        """
        Checks that the portfolio holds at least ``quantity`` of the instrument.

        Returns the position, or None when the portfolio never held the instrument
        and ``quantity`` is zero. Raises INSUFFICIENT_INVENTORY otherwise.
        """
        self._validate_quantity(quantity)
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await self._verify(InventoryRepository(db), portfolio_id, instrument_id, quantity)

    async def add(
        self, portfolio_id: str, instrument_id: str, quantity: Decimal, price: Decimal
    ) -> InventoryPosition:
        logger.info(f"Trying to add inventory of {instrument_id} to {portfolio_id} portfolio")
        self._validate_quantity(quantity)
        if price is None or price < 0:
            raise reject(
                logger,
                TradingErrorCode.INVALID_AMOUNT,
                "Price must be a non-negative amount",
                price=price,
            )

        async with self.transactions.transaction(IsolationLevel.REPEATABLE_READ) as db:
            repo = InventoryRepository(db)
            position = await repo.get(portfolio_id, instrument_id, for_update=True)
            if position is None:
                position = InventoryPosition(
                    portfolio_id=portfolio_id,
                    instrument_id=instrument_id,
                    quantity=ZERO,
                    average_price=ZERO,
                )

            current_quantity = position.quantity
            updated_quantity = quantize_quantity(current_quantity + quantity)
            if updated_quantity == 0:
                position.average_price = ZERO
            else:
                total_cost = position.average_price * current_quantity + price * quantity
                position.average_price = quantize_money(total_cost / updated_quantity)
            position.quantity = updated_quantity
            return await repo.save(position)

    async def remove(self, portfolio_id: str, instrument_id: str, quantity: Decimal) -> InventoryPosition:
        logger.info(f"Trying to remove inventory of {instrument_id} from {portfolio_id} portfolio")
        self._validate_quantity(quantity)

        async with self.transactions.transaction(IsolationLevel.REPEATABLE_READ) as db:
            repo = InventoryRepository(db)
            position = await self._verify(repo, portfolio_id, instrument_id, quantity, for_update=True)
            if position is None:
                # Only reachable for a zero quantity against a position never held.
                position = InventoryPosition(
                    portfolio_id=portfolio_id,
                    instrument_id=instrument_id,
                    quantity=ZERO,
                    average_price=ZERO,
                )

            position.quantity = quantize_quantity(position.quantity - quantity)
            if position.quantity == 0:
                position.average_price = ZERO
            return await repo.save(position)

    async def _verify(
        self,
        repo: InventoryRepository,
        portfolio_id: str,
        instrument_id: str,
        quantity: Decimal,
        for_update: bool = False,
    ) -> Optional[InventoryPosition]:
        position = await repo.get(portfolio_id, instrument_id, for_update=for_update)
        available = position.quantity if position is not None else ZERO
        if available < quantity:
            raise reject(
                logger,
                TradingErrorCode.INSUFFICIENT_INVENTORY,
                f"Insufficient inventory for portfolio {portfolio_id}, instrument {instrument_id}: "
                f"required {quantity}, available {available}",
                portfolio_id=portfolio_id,
                instrument_id=instrument_id,
                required=quantity,
                available=available,
            )
        return position

    @staticmethod
    def _validate_quantity(quantity: Optional[Decimal]) -> None:
        if quantity is None:
            raise reject(logger, TradingErrorCode.INVALID_QUANTITY, "Quantity cannot be null")
        if quantity < 0:
            raise reject(
                logger,
                TradingErrorCode.INVALID_QUANTITY,
                "Quantity cannot be negative",
                quantity=quantity,
            )
