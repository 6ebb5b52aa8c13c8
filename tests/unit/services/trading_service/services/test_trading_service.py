# tests/unit/services/trading_service/services/test_trading_service.py
import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.services.trading_service.app.dtos.order_dto import OrderRequest
from src.services.trading_service.app.services.buying_power_service import BuyingPowerService
from src.services.trading_service.app.services.inventory_service import InventoryService
from src.services.trading_service.app.services.order_service import OrderService
from src.services.trading_service.app.services.trading_service import TradingService
from trading_common.database_models import OrderSide, OrderStatus
from trading_common.exceptions import TradingError, TradingErrorCode
from trading_common.transactions import TransactionManager

pytestmark = pytest.mark.asyncio

NVIDIA = "US67066G1040"  # reference price 100.00
APPLE = "US0378331005"  # reference price 200.00


@pytest_asyncio.fixture
async def buying_power(transaction_manager: TransactionManager) -> BuyingPowerService:
    return BuyingPowerService(transaction_manager, initial_buying_power=Decimal("5000.00"))


@pytest_asyncio.fixture
async def inventory(transaction_manager: TransactionManager) -> InventoryService:
    return InventoryService(transaction_manager)


@pytest_asyncio.fixture
async def orders(transaction_manager: TransactionManager) -> OrderService:
    return OrderService(transaction_manager)


@pytest_asyncio.fixture
async def service(transaction_manager, buying_power, inventory, orders) -> TradingService:
    return TradingService(
        transaction_manager,
        order_service=orders,
        buying_power_service=buying_power,
        inventory_service=inventory,
    )


def _request(side: OrderSide, quantity: str, instrument_id: str = NVIDIA, portfolio_id: str = "PF-1"):
    return OrderRequest(
        portfolio_id=portfolio_id,
        instrument_id=instrument_id,
        side=side,
        quantity=Decimal(quantity),
    )


async def test_buy_order_lifecycle(service: TradingService, buying_power, inventory):
    """
    GIVEN a new portfolio
    WHEN a BUY of 10 at 100.00 is created and then executed
    THEN the order moves CREATED -> EXECUTED, buying power drops by 1000.00
    and the portfolio holds 10.00 of the instrument.
    """
    order = await service.create_order(_request(OrderSide.BUY, "10"))
    assert order.status == OrderStatus.CREATED.value
    assert order.price == Decimal("100.00")
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("5000.00")

    executed = await service.execute_order(order.id)

    assert executed.status == OrderStatus.EXECUTED.value
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("4000.00")
    position = await inventory.get("PF-1", NVIDIA)
    assert position.quantity == Decimal("10.00")
    assert position.average_price == Decimal("100.00")


async def test_sell_order_lifecycle(service: TradingService, buying_power, inventory):
    bought = await service.create_order(_request(OrderSide.BUY, "10"))
    await service.execute_order(bought.id)

    sold = await service.create_order(_request(OrderSide.SELL, "4"))
    executed = await service.execute_order(sold.id)

    assert executed.status == OrderStatus.EXECUTED.value
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("4400.00")
    assert (await inventory.get("PF-1", NVIDIA)).quantity == Decimal("6.00")


async def test_buy_without_enough_buying_power_is_rejected(service: TradingService, buying_power, orders):
    """
    GIVEN a portfolio with 300.00 buying power
    WHEN a BUY requiring 500.00 is submitted
    THEN INSUFFICIENT_FUNDS is raised, no order is stored and the balance is unchanged.
    """
    await buying_power.deduct("PF-1", Decimal("4700.00"))

    with pytest.raises(TradingError) as exc_info:
        await service.create_order(_request(OrderSide.BUY, "5"))

    assert exc_info.value.code is TradingErrorCode.INSUFFICIENT_FUNDS
    assert await orders.list_pending("PF-1") == []
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("300.00")


async def test_sell_without_enough_inventory_is_rejected(service: TradingService, inventory, orders):
    """
    GIVEN a portfolio holding 3.00 of an instrument
    WHEN a SELL of 5.00 is submitted
    THEN INSUFFICIENT_INVENTORY is raised and no order is stored.
    """
    await inventory.add("PF-1", NVIDIA, Decimal("3"), Decimal("100.00"))

    with pytest.raises(TradingError) as exc_info:
        await service.create_order(_request(OrderSide.SELL, "5"))

    assert exc_info.value.code is TradingErrorCode.INSUFFICIENT_INVENTORY
    assert await orders.list_pending("PF-1") == []


async def test_create_order_for_unknown_instrument_is_rejected(service: TradingService):
    with pytest.raises(TradingError) as exc_info:
        await service.create_order(_request(OrderSide.BUY, "1", instrument_id="XX0000000000"))

    assert exc_info.value.code is TradingErrorCode.UNKNOWN_INSTRUMENT


async def test_cancelled_order_cannot_be_executed(service: TradingService, buying_power):
    """
    GIVEN a CREATED order
    WHEN it is cancelled and then executed
    THEN it is CANCELLED, the ledger is untouched and execution fails with INVALID_STATE.
    """
    order = await service.create_order(_request(OrderSide.BUY, "2", instrument_id=APPLE))

    cancelled = await service.cancel_order(order.id)
    assert cancelled.status == OrderStatus.CANCELLED.value
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("5000.00")

    with pytest.raises(TradingError) as exc_info:
        await service.execute_order(order.id)
    assert exc_info.value.code is TradingErrorCode.INVALID_STATE


async def test_executing_twice_fails_with_invalid_state(service: TradingService, buying_power):
    order = await service.create_order(_request(OrderSide.BUY, "1"))
    await service.execute_order(order.id)

    with pytest.raises(TradingError) as exc_info:
        await service.execute_order(order.id)

    assert exc_info.value.code is TradingErrorCode.INVALID_STATE
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("4900.00")


async def test_missing_order_raises_not_found(service: TradingService):
    for operation in (service.get_order, service.execute_order, service.cancel_order):
        with pytest.raises(TradingError) as exc_info:
            await operation(404)
        assert exc_info.value.code is TradingErrorCode.ORDER_NOT_FOUND


async def test_execution_rejected_when_funds_dropped_after_creation(service: TradingService, buying_power, orders):
    """
    GIVEN a BUY order of 1000.00 created while the balance was sufficient
    WHEN the balance drops to 500.00 before execution
    THEN execution fails with INSUFFICIENT_FUNDS and nothing changes.
    """
    order = await service.create_order(_request(OrderSide.BUY, "10"))
    await buying_power.deduct("PF-1", Decimal("4500.00"))

    with pytest.raises(TradingError) as exc_info:
        await service.execute_order(order.id)

    assert exc_info.value.code is TradingErrorCode.INSUFFICIENT_FUNDS
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("500.00")
    assert (await orders.get(order.id)).status == OrderStatus.CREATED.value


async def test_execution_failure_rolls_back_every_ledger_step(
    transaction_manager: TransactionManager, buying_power, inventory, orders
):
    """
    GIVEN a BUY order whose inventory step fails after buying power was deducted
    WHEN the order is executed
    THEN the error propagates, the deduction is rolled back and the order stays CREATED.
    """
    service = TradingService(
        transaction_manager,
        order_service=orders,
        buying_power_service=buying_power,
        inventory_service=inventory,
    )
    order = await service.create_order(_request(OrderSide.BUY, "10"))
    inventory.add = AsyncMock(side_effect=RuntimeError("inventory store unavailable"))

    with pytest.raises(RuntimeError, match="inventory store unavailable"):
        await service.execute_order(order.id)

    inventory.add.assert_awaited_once()
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("5000.00")
    assert (await orders.get(order.id)).status == OrderStatus.CREATED.value
    assert await inventory.get("PF-1", NVIDIA) is None


async def test_concurrent_executions_apply_the_order_once(service: TradingService, buying_power, inventory):
    """
    GIVEN a CREATED BUY order
    WHEN two executions of it race
    THEN exactly one succeeds, the other fails with INVALID_STATE and the
    ledger effects are applied once.
    """
    order = await service.create_order(_request(OrderSide.BUY, "10"))

    results = await asyncio.gather(
        service.execute_order(order.id),
        service.execute_order(order.id),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, TradingError)]
    successes = [r for r in results if not isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert failures[0].code is TradingErrorCode.INVALID_STATE
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("4000.00")
    assert (await inventory.get("PF-1", NVIDIA)).quantity == Decimal("10.00")


async def test_concurrent_executions_exceeding_balance_only_one_succeeds(
    service: TradingService, buying_power
):
    """
    GIVEN two CREATED BUY orders of 3000.00 each against 5000.00 buying power
    WHEN both are executed concurrently
    THEN exactly one succeeds and the other fails with INSUFFICIENT_FUNDS.
    """
    first = await service.create_order(_request(OrderSide.BUY, "15", instrument_id=APPLE))
    second = await service.create_order(_request(OrderSide.BUY, "15", instrument_id=APPLE))

    results = await asyncio.gather(
        service.execute_order(first.id),
        service.execute_order(second.id),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, TradingError)]
    assert len(failures) == 1
    assert failures[0].code is TradingErrorCode.INSUFFICIENT_FUNDS
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("2000.00")


async def test_sell_execution_rejected_when_inventory_removed_after_creation(
    service: TradingService, buying_power, inventory, orders
):
    """
    GIVEN a SELL order of 5 created while the portfolio held 5
    WHEN the inventory is removed before execution
    THEN execution fails with INSUFFICIENT_INVENTORY, the order stays CREATED
    and the buying power is unchanged.
    """
    await inventory.add("PF-1", NVIDIA, Decimal("5"), Decimal("100.00"))
    order = await service.create_order(_request(OrderSide.SELL, "5"))
    await inventory.remove("PF-1", NVIDIA, Decimal("5"))
    balance_before = (await buying_power.get_buying_power("PF-1")).amount

    with pytest.raises(TradingError) as exc_info:
        await service.execute_order(order.id)

    assert exc_info.value.code is TradingErrorCode.INSUFFICIENT_INVENTORY
    assert (await orders.get(order.id)).status == OrderStatus.CREATED.value
    assert (await buying_power.get_buying_power("PF-1")).amount == balance_before
    assert (await inventory.get("PF-1", NVIDIA)).quantity == Decimal("0.00")


async def test_concurrent_sell_executions_exceeding_inventory_only_one_succeeds(
    service: TradingService, buying_power, inventory, orders
):
    """
    GIVEN two CREATED SELL orders of 5 each against a position of 6
    WHEN both are executed concurrently
    THEN exactly one succeeds, the other fails with INSUFFICIENT_INVENTORY and stays
    CREATED, and the proceeds are credited once.
    """
    await inventory.add("PF-1", NVIDIA, Decimal("6"), Decimal("100.00"))
    first = await service.create_order(_request(OrderSide.SELL, "5"))
    second = await service.create_order(_request(OrderSide.SELL, "5"))

    results = await asyncio.gather(
        service.execute_order(first.id),
        service.execute_order(second.id),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, TradingError)]
    assert len(failures) == 1
    assert failures[0].code is TradingErrorCode.INSUFFICIENT_INVENTORY
    assert [o.status for o in await orders.list_pending("PF-1")] == [OrderStatus.CREATED.value]
    assert (await inventory.get("PF-1", NVIDIA)).quantity == Decimal("1.00")
    assert (await buying_power.get_buying_power("PF-1")).amount == Decimal("5500.00")
