"""Trace data crossing the reader -> transform -> reducer boundaries.

These types answer: "What flows through a dependencies job?"

- RawRow: one stored span, still encoded, keyed by trace id
- Span: one decoded span, owned by a single transform invocation
- DependencyLink: a parent -> child service edge with call/error counts
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tracelinks.contracts.enums import SpanKind


@dataclass(frozen=True, slots=True)
class RawRow:
    """A stored span row as produced by the upstream reader.

    Attributes:
        trace_id: Trace identifier the row was partitioned on
        encoded_span: Encoded span payload (JSON text, thrift bytes, ...)
    """

    trace_id: str
    encoded_span: str | bytes


@dataclass(frozen=True, slots=True)
class Span:
    """A decoded span with the fields needed to link services."""

    trace_id: str
    span_id: str
    parent_id: str | None = None
    name: str | None = None
    kind: SpanKind | None = None
    local_service: str | None = None
    remote_service: str | None = None
    error: bool = False


@dataclass(frozen=True, slots=True)
class DependencyLink:
    """Directed edge between two services observed calling one another.

    Produced per trace by the Linker and merged by the job driver.
    """

    parent: str
    child: str
    call_count: int
    error_count: int = 0

    def __post_init__(self) -> None:
        if self.call_count < 0:
            raise ValueError(f"call_count must be non-negative, got {self.call_count}")
        if self.error_count < 0:
            raise ValueError(f"error_count must be non-negative, got {self.error_count}")

    @property
    def key(self) -> tuple[str, str]:
        """(parent, child) pair identifying the edge."""
        return (self.parent, self.child)

    def merge(self, other: DependencyLink) -> DependencyLink:
        """Sum the counts of two links for the same edge."""
        if other.key != self.key:
            raise ValueError(f"Cannot merge link {other.key} into {self.key}")
        return DependencyLink(
            parent=self.parent,
            child=self.child,
            call_count=self.call_count + other.call_count,
            error_count=self.error_count + other.error_count,
        )


# All rows share one trace_id; membership is decided upstream.
TraceGroup = Sequence[RawRow]
