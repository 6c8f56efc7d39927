"""Core infrastructure: lazy resources, logging, and configuration."""

from tracelinks.core.config import (
    JobSettings,
    LoggingSettings,
    TracelinksSettings,
    load_settings,
)
from tracelinks.core.lazy import LazyResource
from tracelinks.core.logging import LogInitializer, configure_logging, get_logger

__all__ = [
    "JobSettings",
    "LazyResource",
    "LogInitializer",
    "LoggingSettings",
    "TracelinksSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
