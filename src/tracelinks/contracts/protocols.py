"""Protocol definitions for collaborators injected into tracelinks.

The decoding grammar and the linking algorithm live outside this
package. Jobs and fixtures receive them through these protocols.
"""

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tracelinks.contracts.results import CheckResult
    from tracelinks.contracts.traces import DependencyLink, Span


@runtime_checkable
class Decoder(Protocol):
    """Converts one encoded span row into zero or more spans.

    Error handling:
        decode_into() raises on malformed input. Callers treat any
        exception as a skippable, loggable event for that row.
    """

    def decode_into(self, encoded: str | bytes, out: list["Span"]) -> None:
        """Append the spans decoded from `encoded` to `out`."""
        ...


@runtime_checkable
class Linker(Protocol):
    """Converts the spans of one trace into dependency links.

    Lifecycle:
        1. put_trace() with every decoded span of the trace
        2. link() once to read the edges

    A linker instance is used for exactly one trace.
    """

    def put_trace(self, spans: Iterable["Span"]) -> None: ...

    def link(self) -> list["DependencyLink"]: ...


LinkerFactory = Callable[[], Linker]

# Zero-argument side effect. Idempotence comes from the LazyResource
# that backs it, never from the callable itself.
Initializer = Callable[[], None]


@runtime_checkable
class ServiceProcess(Protocol):
    """An externally started backing service (container, binary, ...).

    Every method may raise. Fixtures tolerate start() failures and fall
    back to a well-known address.
    """

    def start(self) -> None: ...

    def is_running(self) -> bool: ...

    def address(self) -> str:
        """Reachable "host:port" of the running service."""
        ...

    def stop(self) -> None:
        """Stop the service. Must be safe to call more than once."""
        ...


@runtime_checkable
class HealthCheckedClient(Protocol):
    """A client that can verify it reaches its backing service."""

    def check(self) -> "CheckResult":
        """Probe the backing service. Must not raise for connectivity errors."""
        ...

    def close(self) -> None:
        """Release the client. Must be idempotent."""
        ...
