# tests/unit/services/trading_service/services/test_portfolio_view_service.py
from decimal import Decimal

import pytest

from src.services.trading_service.app.services.portfolio_view_service import PortfolioViewService
from src.services.trading_service.app.services.trading_service import TradingService
from src.services.trading_service.app.dtos.order_dto import OrderRequest
from trading_common.database_models import OrderSide
from trading_common.transactions import TransactionManager

pytestmark = pytest.mark.asyncio


async def test_new_portfolio_view_has_initial_cash_only(transaction_manager: TransactionManager):
    view = await PortfolioViewService(transaction_manager).get_portfolio("PF-EMPTY")

    assert view.portfolio_id == "PF-EMPTY"
    assert view.available_cash > 0
    assert view.holdings == []
    assert view.pending_orders == []


async def test_portfolio_view_combines_cash_holdings_and_pending_orders(
    transaction_manager: TransactionManager,
):
    """
    GIVEN a portfolio with an executed BUY, a sold-out position and a pending SELL
    WHEN its view is requested
    THEN cash, every position (zeroed ones included) and the pending order are listed.
    """
    trading = TradingService(transaction_manager)
    bought = await trading.create_order(
        OrderRequest(portfolio_id="PF-1", instrument_id="US67066G1040", side=OrderSide.BUY, quantity=Decimal("4"))
    )
    await trading.execute_order(bought.id)
    msft = await trading.create_order(
        OrderRequest(portfolio_id="PF-1", instrument_id="US5949181045", side=OrderSide.BUY, quantity=Decimal("2"))
    )
    await trading.execute_order(msft.id)
    sold_out = await trading.create_order(
        OrderRequest(portfolio_id="PF-1", instrument_id="US5949181045", side=OrderSide.SELL, quantity=Decimal("2"))
    )
    await trading.execute_order(sold_out.id)
    pending = await trading.create_order(
        OrderRequest(portfolio_id="PF-1", instrument_id="US67066G1040", side=OrderSide.SELL, quantity=Decimal("1"))
    )

    view = await PortfolioViewService(transaction_manager).get_portfolio("PF-1")

    initial = (await trading.buying_power_service.get_buying_power("PF-EMPTY")).amount
    assert view.available_cash == initial - Decimal("400.00")
    assert [(h.instrument_id, h.quantity, h.average_price) for h in view.holdings] == [
        ("US5949181045", Decimal("0.00"), Decimal("0.00")),
        ("US67066G1040", Decimal("4.00"), Decimal("100.00")),
    ]
    assert len(view.pending_orders) == 1
    assert view.pending_orders[0].order_id == pending.id
    assert view.pending_orders[0].side is OrderSide.SELL
    assert view.pending_orders[0].price == Decimal("100.00")
