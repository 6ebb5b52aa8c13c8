from fastapi import APIRouter, Depends
from trading_common.db import get_transaction_manager
from trading_common.exceptions import TradingError
from trading_common.transactions import TransactionManager

from ..dtos.portfolio_dto import PortfolioView
from ..error_mapping import to_http_exception
from ..services.portfolio_view_service import PortfolioViewService

router = APIRouter(prefix="/portfolios", tags=["Portfolios"])


def get_portfolio_view_service(
    transactions: TransactionManager = Depends(get_transaction_manager),
) -> PortfolioViewService:
    return PortfolioViewService(transactions)


@router.get(
    "/{portfolio_id}",
    response_model=PortfolioView,
    summary="Get a Portfolio Snapshot",
    description=(
        "Returns the available cash, inventory positions and pending orders of a portfolio. "
        "A portfolio seen for the first time is granted the initial buying power."
    ),
)
async def get_portfolio(
    portfolio_id: str,
    service: PortfolioViewService = Depends(get_portfolio_view_service),
):
    try:
        return await service.get_portfolio(portfolio_id)
    except TradingError as exc:
        raise to_http_exception(exc)
