# src/libs/trading-common/trading_common/config.py
import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

# Load environment variables from a .env file for local development.
load_dotenv()


def _decimal_env(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a decimal number, got {raw!r}")
    if not value.is_finite() or value < 0:
        raise ValueError(f"{name} must be a non-negative decimal number, got {raw!r}")
    return value


# Database Configurations
POSTGRES_USER = os.getenv("POSTGRES_USER", "user")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "password")
POSTGRES_DB = os.getenv("POSTGRES_DB", "trading_db")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "postgres")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

# Service identity, stamped on every log record
SERVICE_NAME = os.getenv("SERVICE_NAME", "trading-service")
ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

# Trading Configurations
# Cash granted to a portfolio the first time its buying power is read.
INITIAL_BUYING_POWER = _decimal_env("TRADING_INITIAL_BUYING_POWER", "5000.00")
