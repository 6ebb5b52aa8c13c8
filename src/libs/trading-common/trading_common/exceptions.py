# src/libs/trading-common/trading_common/exceptions.py
from enum import Enum
from typing import Any, Dict


class TradingErrorCode(str, Enum):
    """Reason codes for every business rejection the ledger can produce."""

    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    UNKNOWN_INSTRUMENT = "UNKNOWN_INSTRUMENT"


class TradingError(Exception):
    """
    Raised when a ledger or order operation is rejected by a business rule.

    Callers branch on ``code`` rather than on the exception type. None of these
    rejections are transient, so nothing in the core retries them; raising one from
    inside a transaction scope rolls the whole scope back.
    """

    def __init__(self, code: TradingErrorCode, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context: Dict[str, Any] = context
        super().__init__(f"{code.value}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "context": {key: str(value) for key, value in self.context.items()},
        }
