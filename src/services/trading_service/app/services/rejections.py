# src/services/trading_service/app/services/rejections.py
import logging
from typing import Any

from trading_common.exceptions import TradingError, TradingErrorCode
from trading_common.monitoring import observe_rejection


def reject(logger: logging.Logger, code: TradingErrorCode, message: str, **context: Any) -> TradingError:
    """Logs and counts a business rejection, returning the error for the caller to raise."""
    logger.warning(message, extra={"rejection_code": code.value})
    observe_rejection(code.value)
    return TradingError(code, message, **context)
