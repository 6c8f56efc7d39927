"""Exceptions raised across subsystem boundaries.

Row decode failures are deliberately absent: decoders raise whatever
they raise, and the trace group linker records them as DecodeFailure
values instead of propagating.
"""


class ResourceUnavailableError(Exception):
    """Raised when a lazily acquired resource fails its health check.

    Callers should treat this as "resource unavailable" and skip the
    dependent work rather than fail the system under test.

    Attributes:
        resource_name: Name of the resource that is unavailable
        message: Diagnostic from the failed health check
    """

    def __init__(self, resource_name: str, message: str) -> None:
        self.resource_name = resource_name
        self.message = message
        super().__init__(f"Resource '{resource_name}' unavailable: {message}")


class ResourceClosedError(Exception):
    """Raised when get() is called on a resource that was already closed."""

    def __init__(self, resource_name: str) -> None:
        self.resource_name = resource_name
        super().__init__(f"Resource '{resource_name}' is closed")


class ReentrantComputationError(RuntimeError):
    """Raised when a resource's computation calls get() on itself.

    Without this check the computing thread would wait on its own
    computation forever.
    """

    def __init__(self, resource_name: str) -> None:
        self.resource_name = resource_name
        super().__init__(f"Resource '{resource_name}' requested itself while computing")


class ServiceStartError(Exception):
    """Raised when an external service process cannot be started.

    Fixtures tolerate this error and fall back to a well-known address.

    Attributes:
        service_name: Image or binary that failed to start
        message: Human-readable error description
    """

    def __init__(self, service_name: str, message: str) -> None:
        self.service_name = service_name
        self.message = message
        super().__init__(f"Service '{service_name}' failed to start: {message}")
