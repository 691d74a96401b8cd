"""Structured logging setup: structlog over stdlib logging, JSON or console output."""

import logging
import os

import structlog

#: Third-party loggers that are noisy at DEBUG and only interesting on warnings.
_QUIET_LOGGERS = ("ccxt", "asyncio", "urllib3")


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog and stdlib logging through one ProcessorFormatter.

    Context is carried with structlog.contextvars so values bound for a run
    (symbol, mode) survive across awaits. LOG_FORMAT selects the renderer:
    "json" for machine-readable lines, anything else for the console renderer.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_run_context(**values: object) -> None:
    """Attach key/value pairs to every log line emitted for the current run."""
    structlog.contextvars.bind_contextvars(**values)


def clear_run_context() -> None:
    """Drop all values bound with bind_run_context."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
