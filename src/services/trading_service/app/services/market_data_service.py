# src/services/trading_service/app/services/market_data_service.py
import logging
from decimal import Decimal
from typing import Dict, Mapping, Optional

from trading_common.exceptions import TradingErrorCode

from .rejections import reject

logger = logging.getLogger(__name__)

# Reference prices by ISIN.
REFERENCE_PRICES: Dict[str, Decimal] = {
    "US67066G1040": Decimal("100.00"),  # NVIDIA
    "US0378331005": Decimal("200.00"),  # Apple
    "US5949181045": Decimal("35.50"),  # Microsoft
}


class MarketDataService:
    """Quotes the current trade price of an instrument from a fixed price table."""

    def __init__(self, prices: Optional[Mapping[str, Decimal]] = None):
        self.prices = dict(REFERENCE_PRICES if prices is None else prices)

    def get_price(self, instrument_id: str) -> Decimal:
        price = self.prices.get(instrument_id)
        if price is None:
            raise reject(
                logger,
                TradingErrorCode.UNKNOWN_INSTRUMENT,
                f"Unknown instrument: {instrument_id}",
                instrument_id=instrument_id,
            )
        return price
