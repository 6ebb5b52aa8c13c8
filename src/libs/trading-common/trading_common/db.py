# src/libs/trading-common/trading_common/db.py
import os

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DB
from .transactions import TransactionManager


def get_async_database_url():
    """
    Determines the async database URL.
    Prioritizes DATABASE_URL; PostgreSQL URLs are rewritten to the asyncpg driver.
    """
    url = os.getenv("DATABASE_URL") or f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def enable_sqlite_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Takes over transaction demarcation from the sqlite3 driver.

    The driver defers BEGIN until the first write, which lets two transactions read
    the same balance before either writes it. Starting every transaction with
    BEGIN IMMEDIATE acquires the database write lock up front, so concurrent
    read-modify-write transactions run one after the other.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        # Lock waits are bounded by the driver's busy timeout (seconds).
        engine = create_async_engine(url, connect_args={"timeout": 30})
        enable_sqlite_immediate_transactions(engine)
        return engine
    return create_async_engine(url, pool_pre_ping=True)


async_engine = create_db_engine(get_async_database_url())

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

transaction_manager = TransactionManager(async_engine, AsyncSessionLocal)


def get_transaction_manager() -> TransactionManager:
    """
    A FastAPI dependency that provides the process-wide TransactionManager.
    """
    return transaction_manager
