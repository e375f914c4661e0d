"""
Structured logging configuration using structlog.

This module configures structured logging with Datadog-compatible field names
for easy integration with observability platforms (Datadog, Elastic, CloudWatch).

Usage:
    from apps.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("owner_signup_completed", organization_id=org.id, **{"usr.id": user_id})

Field naming follows Datadog standard attributes:
    - usr.id: Stytch user_id of the session principal
    - usr.email: User email
    - organization.id: Organization/tenant identifier (logged as organization_id)
    - http.status_code: Response status code

Credentials passed as log fields (password, session tokens, invite tokens) are
masked before rendering.

See: https://docs.datadoghq.com/logs/log_configuration/attributes_naming_convention/
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


REDACTED = "[REDACTED]"
SECRET_FIELDS = frozenset({"password", "session_jwt", "session_token", "invite_token", "token"})


def _redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential fields so they never reach the log sink."""
    for key in SECRET_FIELDS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _rename_tenant_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Map organization_id to the dotted organization.id attribute."""
    if "organization_id" in event_dict:
        event_dict["organization.id"] = str(event_dict.pop("organization_id"))
    return event_dict


def configure_logging(json_format: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog for the application.

    Uses stdlib integration for compatibility with Django and third-party libraries.

    Args:
        json_format: If True, output JSON (production). If False, pretty console output (development).
        log_level: Minimum log level to output.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    # Processors that run before passing to stdlib
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_secrets,
        _rename_tenant_fields,
    ]

    if json_format:
        # Production: JSON output
        renderer: Processor = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        # Development: Pretty console output with colors
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    # Configure structlog to use stdlib LoggerFactory
    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging with structlog formatter
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A bound structlog logger with context support.

    Usage:
        logger = get_logger(__name__)
        logger.info("event_name", key="value", another_key=123)
    """
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None:
    """
    Bind key-value pairs to the current context.

    These values will be included in all subsequent log messages
    within the current request/task context.

    Args:
        **kwargs: Key-value pairs to bind to context.

    Usage:
        bind_contextvars(
            **{"usr.id": principal.user_id},  # Use dict unpacking for dotted keys
        )
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_contextvars() -> None:
    """
    Clear all bound context variables.

    Call this at the end of request processing to prevent
    context leakage between requests (especially in async workers).
    """
    structlog.contextvars.clear_contextvars()
