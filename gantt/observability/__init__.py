"""
Observability module: structured logging and request IDs.

Usage:
    from gantt.observability import configure_logging, get_logger, RequestContext

    configure_logging("INFO")
    logger = get_logger(__name__)

    with RequestContext() as ctx:
        logger.info("Timeline rebuilt", extra={"total_days": 3654})
"""

from .context import RequestContext, generate_request_id, get_request_id, set_request_id
from .logging import (
    CorrelationIdMiddleware,
    HumanFormatter,
    JSONFormatter,
    configure_log_file,
    configure_logging,
    get_logger,
)

__all__ = [
    "RequestContext",
    "generate_request_id",
    "get_request_id",
    "set_request_id",
    "CorrelationIdMiddleware",
    "HumanFormatter",
    "JSONFormatter",
    "configure_log_file",
    "configure_logging",
    "get_logger",
]
