# src/services/trading_service/app/error_mapping.py
from fastapi import HTTPException, status
from trading_common.exceptions import TradingError, TradingErrorCode

# Every business rejection is a client error except a missing order.
_STATUS_BY_CODE = {
    TradingErrorCode.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def status_for(code: TradingErrorCode) -> int:
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


def to_http_exception(exc: TradingError) -> HTTPException:
    return HTTPException(status_code=status_for(exc.code), detail=exc.to_dict())
