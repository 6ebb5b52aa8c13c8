# src/libs/trading-common/trading_common/db_base.py
from sqlalchemy.orm import declarative_base

# Define Base here to be imported by all SQLAlchemy models
Base = declarative_base()
