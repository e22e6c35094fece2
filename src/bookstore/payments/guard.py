"""Hard time limit around payment gateway calls.

Adapters set their own socket timeouts, but a slow server can still trickle a
response past them. Each call here runs on a worker thread and the caller
stops waiting once the configured limit passes. A timed-out call is abandoned,
never retried.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

import structlog

from bookstore.config import get_settings
from bookstore.errors import PaymentGatewayError

logger = structlog.get_logger(__name__)

_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="gateway")


def call_gateway(operation: str, fn, *args, timeout: float | None = None):
    """Run ``fn(*args)`` with a time limit, mapping every failure to PaymentGatewayError."""
    limit = timeout if timeout is not None else get_settings().gateway_timeout_seconds
    future = _executor.submit(fn, *args)
    try:
        return future.result(timeout=limit)
    except FutureTimeout:
        future.cancel()
        logger.warning("gateway_timeout", operation=operation, timeout=limit)
        raise PaymentGatewayError(f"{operation} timed out after {limit}s") from None
    except PaymentGatewayError as exc:
        logger.warning("gateway_error", operation=operation, reason=exc.reason)
        raise
    except Exception as exc:
        logger.exception("gateway_failure", operation=operation)
        raise PaymentGatewayError(f"{operation} failed: {exc}") from exc
