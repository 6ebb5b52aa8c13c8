# tests/conftest.py
import os
import sys

# The application modules build their engine at import time; point them at SQLite
# before anything imports trading_common.db.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)
trading_common_path = os.path.join(project_root, 'src', 'libs', 'trading-common')
if trading_common_path not in sys.path:
    sys.path.insert(0, trading_common_path)

from trading_common.database_models import Base  # noqa: E402
from trading_common.db import create_db_engine  # noqa: E402
from trading_common.transactions import TransactionManager  # noqa: E402


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncEngine:
    """
    Provides an async engine over a fresh file-backed SQLite database with the
    ledger schema created. A file database lets concurrent sessions use separate
    connections, as they would against PostgreSQL.
    """
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def transaction_manager(db_engine: AsyncEngine) -> TransactionManager:
    return TransactionManager(db_engine)


@pytest_asyncio.fixture
async def async_db_session(db_engine: AsyncEngine) -> AsyncSession:
    """Provides a plain session for repository tests that manage their own commits."""
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session
