# Core infrastructure
from commentstore.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_trace_id,
    get_user_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from commentstore.core.logging import configure_structlog, get_logger
from commentstore.core.middleware import USER_HEADER, RequestContextMiddleware


__all__ = [
    "USER_HEADER",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "get_user_id",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
]
