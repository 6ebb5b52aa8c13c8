# src/libs/trading-common/trading_common/logging_utils.py
import logging
import sys
import uuid
from contextvars import ContextVar

from pythonjsonlogger import jsonlogger

from .config import ENVIRONMENT, SERVICE_NAME

# Per-request identifiers. The HTTP middleware sets them; anything logged outside a
# request sees the default.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="<not-set>")
request_id_var: ContextVar[str] = ContextVar("request_id", default="<not-set>")
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="<not-set>")


class CorrelationIdFilter(logging.Filter):
    """
    A logging filter that injects the current request identifiers and the
    service identity into every log record.
    """

    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        record.request_id = request_id_var.get()
        record.trace_id = trace_id_var.get()
        record.service = SERVICE_NAME
        record.environment = ENVIRONMENT
        return True


def setup_logging(level: int = logging.INFO):
    """
    Configures the root logger for structured JSON logging so that every module
    logger (including SQLAlchemy and uvicorn) inherits the same format.
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers to prevent duplicate logs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s %(service)s %(environment)s %(correlation_id)s %(request_id)s %(trace_id)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
    )
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger.addHandler(handler)


def generate_correlation_id(prefix: str) -> str:
    """
    Generates a new correlation ID with a service-specific prefix.
    Args:
        prefix: A short code for the service (e.g., 'TRD').
    Returns:
        A formatted correlation ID string.
    """
    return f"{prefix}:{uuid.uuid4()}"
