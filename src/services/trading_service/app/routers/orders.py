from fastapi import APIRouter, Depends
from trading_common.db import get_transaction_manager
from trading_common.exceptions import TradingError
from trading_common.transactions import TransactionManager

from ..dtos.order_dto import OrderRecord, OrderRequest
from ..error_mapping import to_http_exception
from ..services.trading_service import TradingService

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_trading_service(
    transactions: TransactionManager = Depends(get_transaction_manager),
) -> TradingService:
    return TradingService(transactions)


@router.post(
    "",
    response_model=OrderRecord,
    summary="Submit an Order",
    description=(
        "Creates a BUY or SELL order at the current market price. BUY orders require enough "
        "buying power and SELL orders enough inventory; nothing is reserved until execution."
    ),
)
async def create_order(
    request: OrderRequest,
    service: TradingService = Depends(get_trading_service),
):
    try:
        order = await service.create_order(request)
    except TradingError as exc:
        raise to_http_exception(exc)
    return OrderRecord.model_validate(order)


@router.get("/{order_id}", response_model=OrderRecord, summary="Get an Order by ID")
async def get_order(
    order_id: int,
    service: TradingService = Depends(get_trading_service),
):
    """
    Retrieves a single order by its ID.
    Returns a `404 Not Found` if the order does not exist.
    """
    try:
        order = await service.get_order(order_id)
    except TradingError as exc:
        raise to_http_exception(exc)
    return OrderRecord.model_validate(order)


@router.delete("/{order_id}", response_model=OrderRecord, summary="Cancel an Order")
async def cancel_order(
    order_id: int,
    service: TradingService = Depends(get_trading_service),
):
    try:
        order = await service.cancel_order(order_id)
    except TradingError as exc:
        raise to_http_exception(exc)
    return OrderRecord.model_validate(order)


@router.put(
    "/{order_id}/execute",
    response_model=OrderRecord,
    summary="Execute an Order",
    description=(
        "Fills a CREATED order in full at its captured price. BUY deducts buying power and "
        "adds inventory; SELL removes inventory and adds the proceeds to buying power."
    ),
)
async def execute_order(
    order_id: int,
    service: TradingService = Depends(get_trading_service),
):
    try:
        order = await service.execute_order(order_id)
    except TradingError as exc:
        raise to_http_exception(exc)
    return OrderRecord.model_validate(order)
