# src/libs/trading-common/trading_common/monitoring.py
import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------
# DB metrics (used by trading_common.utils.async_timed)
# --------------------------------------------------------------------------------------
DB_OPERATION_LATENCY_SECONDS = Histogram(
    "db_operation_latency_seconds",
    "Latency of database operations in seconds",
    labelnames=("repository", "method"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

TRANSACTION_ROLLBACKS_TOTAL = Counter(
    "transaction_rollbacks_total",
    "Transactions rolled back, by isolation level and cause",
    labelnames=("isolation_level", "reason"),
)


def observe_transaction_rollback(isolation_level: str, reason: str) -> None:
    TRANSACTION_ROLLBACKS_TOTAL.labels(isolation_level, reason).inc()


# --------------------------------------------------------------------------------------
# Trading metrics
# --------------------------------------------------------------------------------------
ORDERS_TOTAL = Counter(
    "orders_total",
    "Order lifecycle operations by side and outcome",
    labelnames=("operation", "side", "outcome"),
)

LEDGER_REJECTIONS_TOTAL = Counter(
    "ledger_rejections_total",
    "Business rejections raised by the ledgers and order store",
    labelnames=("code",),
)


def observe_order(operation: str, side: str, outcome: str) -> None:
    ORDERS_TOTAL.labels(operation, side, outcome).inc()


def observe_rejection(code: str) -> None:
    LEDGER_REJECTIONS_TOTAL.labels(code).inc()


# --------------------------------------------------------------------------------------
# HTTP metrics
# --------------------------------------------------------------------------------------
HTTP_REQUESTS_TOTAL = Counter(
    "trading_http_requests_total",
    "HTTP requests total",
    labelnames=("service", "method", "path", "status"),
)

HTTP_REQUEST_LATENCY_SECONDS = Histogram(
    "trading_http_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("service", "method", "path"),
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
