# tests/integration/services/trading_service/test_portfolios_router.py
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from src.services.trading_service.app.dtos.portfolio_dto import (
    HoldingRecord,
    PendingOrderRecord,
    PortfolioView,
)
from src.services.trading_service.app.main import app
from src.services.trading_service.app.routers.portfolios import get_portfolio_view_service

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def async_test_client():
    mock_service = MagicMock()
    mock_service.get_portfolio = AsyncMock(
        return_value=PortfolioView(
            portfolio_id="PF-1",
            available_cash=Decimal("4000.00"),
            holdings=[
                HoldingRecord(
                    instrument_id="US67066G1040",
                    quantity=Decimal("10.00"),
                    average_price=Decimal("100.00"),
                )
            ],
            pending_orders=[
                PendingOrderRecord(
                    order_id=2,
                    instrument_id="US67066G1040",
                    side="SELL",
                    quantity=Decimal("5.00"),
                    price=Decimal("100.00"),
                )
            ],
        )
    )

    app.dependency_overrides[get_portfolio_view_service] = lambda: mock_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, mock_service
    app.dependency_overrides.pop(get_portfolio_view_service, None)


async def test_get_portfolio_success(async_test_client):
    client, mock_service = async_test_client

    response = await client.get("/portfolios/PF-1")

    assert response.status_code == 200
    body = response.json()
    assert body["portfolio_id"] == "PF-1"
    assert Decimal(body["available_cash"]) == Decimal("4000.00")
    assert body["holdings"][0]["instrument_id"] == "US67066G1040"
    assert body["pending_orders"][0]["side"] == "SELL"
    mock_service.get_portfolio.assert_awaited_once_with("PF-1")


async def test_liveness_probe(async_test_client):
    client, _ = async_test_client

    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "alive"}
