# src/libs/trading-common/trading_common/transactions.py
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from enum import Enum
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .exceptions import TradingError
from .monitoring import observe_transaction_rollback

logger = logging.getLogger(__name__)

# The session of the transaction currently open on this task, if any.
_active_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "active_trading_session", default=None
)


class IsolationLevel(str, Enum):
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class TransactionManager:
    """
    Opens database transactions at an explicit isolation level.

    ``transaction()`` yields an ``AsyncSession`` whose connection is pinned to the
    requested isolation level. The scope commits when the block exits normally and
    rolls back on any exception, including task cancellation; the session is always
    closed.

    Scopes nest with "required" propagation: a scope opened while another one is
    active on the same task joins it, sharing its session and leaving the commit to
    the outermost scope. The outer scope therefore decides the isolation level for
    everything that runs inside it.

    SQLite only knows SERIALIZABLE, so every level maps to it there; see
    ``trading_common.db.enable_sqlite_immediate_transactions``.
    """

    def __init__(self, engine: AsyncEngine, session_factory: Optional[async_sessionmaker] = None):
        self._engine = engine
        self._session_factory = session_factory or async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    def _dialect_isolation(self, isolation: IsolationLevel) -> str:
        if self._engine.dialect.name == "sqlite":
            return IsolationLevel.SERIALIZABLE.value
        return isolation.value

    @staticmethod
    def in_transaction() -> bool:
        return _active_session.get() is not None

    @asynccontextmanager
    async def transaction(
        self, isolation: IsolationLevel = IsolationLevel.READ_COMMITTED
    ) -> AsyncIterator[AsyncSession]:
        active = _active_session.get()
        if active is not None:
            yield active
            return

        async with self._session_factory() as session:
            await session.connection(
                execution_options={"isolation_level": self._dialect_isolation(isolation)}
            )
            token = _active_session.set(session)
            try:
                yield session
                await session.commit()
            except BaseException as exc:
                await session.rollback()
                reason = exc.code.value if isinstance(exc, TradingError) else type(exc).__name__
                observe_transaction_rollback(isolation.value, reason)
                logger.debug(f"Rolled back {isolation.value} transaction: {reason}")
                raise
            finally:
                _active_session.reset(token)
