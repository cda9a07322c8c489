"""
Shared logging configuration for the identity SDK.
"""

import sys
import structlog
import logging
import uuid
import time
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for correlation IDs
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
application_href_var: ContextVar[Optional[str]] = ContextVar('application_href', default=None)
account_href_var: ContextVar[Optional[str]] = ContextVar('account_href', default=None)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured logging for the embedding application."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            add_correlation_context,
            add_timestamp,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the package that emitted the event."""
    logger_name = event_dict.get("logger", "")
    if "." in logger_name and "component" not in event_dict:
        event_dict["component"] = logger_name.split(".")[1]

    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add correlation context to log events."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    application_href = application_href_var.get()
    if application_href:
        event_dict["application_href"] = application_href

    account_href = account_href_var.get()
    if account_href:
        event_dict["account_href"] = account_href

    return event_dict


def add_timestamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add high-precision timestamp to log events."""
    event_dict["timestamp"] = time.time()
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set request ID in context."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def set_auth_context(application_href: Optional[str] = None, account_href: Optional[str] = None):
    """Set authentication context in logging."""
    if application_href:
        application_href_var.set(application_href)
    if account_href:
        account_href_var.set(account_href)


def clear_context():
    """Clear all context variables."""
    request_id_var.set(None)
    application_href_var.set(None)
    account_href_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
