# src/services/trading_service/app/services/buying_power_service.py
import logging
from decimal import Decimal
from typing import Optional

from trading_common.config import INITIAL_BUYING_POWER
from trading_common.database_models import BuyingPower
from trading_common.exceptions import TradingErrorCode
from trading_common.precision_policy import quantize_money
from trading_common.transactions import IsolationLevel, TransactionManager

from ..repositories.buying_power_repository import BuyingPowerRepository
from .rejections import reject

logger = logging.getLogger(__name__)


class BuyingPowerService:
    """
    Owns the cash balance of every portfolio.

    Balances are created lazily at the configured initial amount the first time a
    portfolio is seen. Deductions and additions run in SERIALIZABLE transactions and
    lock the balance row, so two concurrent mutations of one portfolio can never both
    act on the same stale balance.
    """

    def __init__(self, transactions: TransactionManager, initial_buying_power: Optional[Decimal] = None):
        self.transactions = transactions
        self.initial_buying_power = quantize_money(
            INITIAL_BUYING_POWER if initial_buying_power is None else initial_buying_power
        )

    async def _get_or_create(
        self, repo: BuyingPowerRepository, portfolio_id: str, for_update: bool = False
    ) -> BuyingPower:
        record = await repo.get(portfolio_id, for_update=for_update)
        if record is None:
            logger.info(
                f"Initialising buying power for portfolio {portfolio_id} at {self.initial_buying_power}"
            )
            await repo.insert_if_absent(portfolio_id, self.initial_buying_power)
            record = await repo.get(portfolio_id, for_update=for_update)
        return record

    async def get_buying_power(self, portfolio_id: str) -> BuyingPower:
        """Returns the balance of a portfolio, creating it on first access."""
        async with self.transactions.transaction(IsolationLevel.READ_COMMITTED) as db:
            return await self._get_or_create(BuyingPowerRepository(db), portfolio_id)

    async def verify_sufficient(self, portfolio_id: str, required_amount: Decimal) -> BuyingPower:
        """
        Checks that the portfolio can cover ``required_amount`` without reserving
        anything. Raises INSUFFICIENT_FUNDS otherwise.
        """
        record = await self.get_buying_power(portfolio_id)
        if record.amount < required_amount:
            raise reject(
                logger,
                TradingErrorCode.INSUFFICIENT_FUNDS,
                f"Insufficient buying power for portfolio {portfolio_id}: "
                f"required {required_amount}, available {record.amount}",
                portfolio_id=portfolio_id,
                required=required_amount,
                available=record.amount,
            )
        return record

    async def deduct(self, portfolio_id: str, amount: Decimal) -> BuyingPower:
        logger.info(f"Trying to deduct buying power from {portfolio_id} portfolio")
        self._validate_amount(amount, "Deduction amount cannot be negative")

        async with self.transactions.transaction(IsolationLevel.SERIALIZABLE) as db:
            repo = BuyingPowerRepository(db)
            record = await self._get_or_create(repo, portfolio_id, for_update=True)
            if record.amount < amount:
                raise reject(
                    logger,
                    TradingErrorCode.INSUFFICIENT_FUNDS,
                    f"Insufficient buying power for portfolio {portfolio_id}: "
                    f"required {amount}, available {record.amount}",
                    portfolio_id=portfolio_id,
                    required=amount,
                    available=record.amount,
                )
            record.amount = quantize_money(record.amount - amount)
            return await repo.save(record)

    async def add(self, portfolio_id: str, amount: Decimal) -> BuyingPower:
        logger.info(f"Trying to add buying power to {portfolio_id} portfolio")
        self._validate_amount(amount, "Addition amount cannot be negative")

        async with self.transactions.transaction(IsolationLevel.SERIALIZABLE) as db:
            repo = BuyingPowerRepository(db)
            record = await self._get_or_create(repo, portfolio_id, for_update=True)
            record.amount = quantize_money(record.amount + amount)
            return await repo.save(record)

    @staticmethod
    def _validate_amount(amount: Optional[Decimal], message: str) -> None:
        if amount is None:
            raise reject(logger, TradingErrorCode.INVALID_AMOUNT, "Amount is required")
        if amount < 0:
            raise reject(logger, TradingErrorCode.INVALID_AMOUNT, message, amount=amount)
