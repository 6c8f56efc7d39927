"""Status codes, phases, and kinds used across subsystem boundaries."""

from enum import StrEnum


class ResourceState(StrEnum):
    """Lifecycle state of a LazyResource.

    UNINITIALIZED -> COMPUTING -> READY | FAILED, and any settled state
    may move to CLOSED. CLOSED and FAILED are terminal for get().
    """

    UNINITIALIZED = "uninitialized"
    COMPUTING = "computing"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class ServicePhase(StrEnum):
    """Phase of a managed backing service used by test fixtures."""

    IDLE = "idle"
    STARTING = "starting"
    STARTED = "started"
    START_FAILED = "start_failed"
    HEALTH_CHECKING = "health_checking"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    CLOSED = "closed"


class SpanKind(StrEnum):
    """Role of a span in a remote call, when known."""

    CLIENT = "CLIENT"
    SERVER = "SERVER"
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"
