# src/tracelinks/core/logging.py
"""Structured logging configuration for tracelinks.

Uses structlog for structured logging routed through stdlib logging.

Architecture:
    This module configures BOTH structlog and stdlib logging to emit
    consistent output (JSON or console). It uses ProcessorFormatter
    to route stdlib log records through structlog's processor chain,
    so modules using logging.getLogger(__name__) produce the same output
    format as modules using structlog.get_logger().

Worker processes:
    Logging configuration is process-local and cannot be shipped to a
    worker. LogInitializer is the picklable handle that is shipped
    instead: calling it configures logging at most once in whichever
    process it runs in.
"""

import logging
import os
import sys
import threading
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from tracelinks.core.lazy import LazyResource

# Third-party loggers that are excessively verbose at DEBUG level.
# Silence them to WARNING even when tracelinks runs in DEBUG mode.
_NOISY_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
    "urllib3",
    "urllib3.connectionpool",
)


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove internal structlog fields from output.

    ProcessorFormatter always adds _record and _from_structlog when
    processing log records. They are bookkeeping, not output.

    del rather than pop(): ProcessorFormatter guarantees both keys, so a
    KeyError here means the structlog wiring below is broken.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog and stdlib logging for tracelinks.

    Both are pointed at one handler, so stdlib loggers (httpx, dynaconf)
    render in the same format as structlog loggers.

    Args:
        json_output: If True, output JSON. If False, human-readable.
        level: Log level (DEBUG, INFO, WARNING, ERROR).
    """
    log_level = getattr(logging, level.upper())

    # Shared processors applied to ALL log records (structlog and stdlib)
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    # Final processors run inside the formatter, after shared_processors
    if json_output:
        final_processors: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    # wrap_for_formatter hands structlog events to ProcessorFormatter
    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Caching would hand tests stale loggers after reconfiguration
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            # Only stdlib records need the shared chain; structlog ones already ran it
            foreign_pre_chain=shared_processors,
        )
    )

    # Replace, not append: configure_logging may run again in tests
    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)

    # Never make noisy loggers less restrictive than the root level
    noisy_level = max(log_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Bound structlog logger.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


# One resource per (pid, json_output, level). The pid in the key means a
# forked worker never reuses its parent's already-computed instance.
_process_initializers: dict[tuple[int, bool, str], LazyResource[None]] = {}
_process_initializers_lock = threading.Lock()


def _process_logging_resource(json_output: bool, level: str) -> LazyResource[None]:
    key = (os.getpid(), json_output, level.upper())
    with _process_initializers_lock:
        resource = _process_initializers.get(key)
        if resource is None:
            # Entries inherited from a parent process can never be used here
            for stale in [k for k in _process_initializers if k[0] != key[0]]:
                del _process_initializers[stale]
            resource = LazyResource(
                lambda: configure_logging(json_output=json_output, level=level),
                name=f"logging[{key[2]}{',json' if json_output else ''}]",
            )
            _process_initializers[key] = resource
        return resource


class LogInitializer:
    """Picklable initializer that configures logging once per process.

    The exactly-once guarantee belongs to the per-process LazyResource
    looked up on each call; this class only carries the settings. Calling
    an instance any number of times, from any number of threads, runs
    configure_logging() once in the current process.

    Example:
        initializer = LogInitializer(json_output=True, level="INFO")
        linker = TraceGroupLinker(decoder, linker_factory, initializer)
        # linker (and initializer) may now be pickled to worker processes
    """

    def __init__(self, *, json_output: bool = False, level: str = "INFO") -> None:
        self.json_output = json_output
        self.level = level

    def __call__(self) -> None:
        _process_logging_resource(self.json_output, self.level).get()

    def __repr__(self) -> str:
        return f"LogInitializer(json_output={self.json_output!r}, level={self.level!r})"
