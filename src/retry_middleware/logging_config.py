"""Structured logging setup for the retry middleware.

The middleware emits structlog events (`Retrying request`, `Retry ceiling
reached`, `Transport failure, not retrying`, ...) with key/value context:
method, url, status_code, attempt, delay_seconds, delay_source.

Being a library, it configures nothing on import. Applications that do not
run their own structlog setup can call `configure_logging`, which by default
attaches a handler to the `retry_middleware` logger namespace only. The
host's root handlers are replaced only with `take_over_root=True`.
"""

import logging
import sys
from typing import IO, TYPE_CHECKING, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from retry_middleware.config import Settings

LOGGER_NAMESPACE = "retry_middleware"

# Marks handlers installed here so repeated calls replace instead of stacking
_HANDLER_MARKER = "_retry_middleware_handler"


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the emitting library."""
    event_dict["app"] = "retry-middleware"
    return event_dict


def _renderer(environment: str) -> Processor:
    if environment.lower() == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    *,
    take_over_root: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """Route retry middleware events through stdlib logging.

    Args:
        log_level: Level for the configured logger (DEBUG, INFO, ...)
        environment: "production" renders JSON, anything else console lines
        take_over_root: Install the handler on the root logger instead of
            the `retry_middleware` namespace, replacing existing handlers
        stream: Output stream (default: sys.stderr)

    Returns:
        The installed handler
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(environment),
            foreign_pre_chain=shared_processors,
        )
    )
    setattr(handler, _HANDLER_MARKER, True)

    if take_over_root:
        target = logging.getLogger()
        target.handlers.clear()
        # httpx logs every request at INFO, which drowns the retry events
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    else:
        target = logging.getLogger(LOGGER_NAMESPACE)
        target.handlers[:] = [
            h for h in target.handlers if not getattr(h, _HANDLER_MARKER, False)
        ]
        target.propagate = False

    target.addHandler(handler)
    target.setLevel(log_level_int)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        target_logger=target.name or "root",
    )
    return handler


def configure_logging_from_settings(settings: "Settings", **kwargs) -> logging.Handler:
    """`configure_logging` driven by LOG_LEVEL and ENVIRONMENT."""
    return configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT, **kwargs)
