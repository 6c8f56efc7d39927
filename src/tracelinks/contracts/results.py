"""Operation outcomes.

These types answer: "What did an operation produce?"

- CheckResult: health check outcome of a freshly constructed client
- DecodeFailure: a row skipped by the trace group linker
- TraceGroupOutcome: links plus diagnostics for one trace group
"""

from __future__ import annotations

from dataclasses import dataclass

from tracelinks.contracts.traces import DependencyLink


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of a health check.

    Use the factory methods rather than constructing directly:

        return CheckResult.healthy()
        return CheckResult.failed(exc)
    """

    ok: bool
    error: BaseException | None = None

    @classmethod
    def healthy(cls) -> CheckResult:
        return cls(ok=True)

    @classmethod
    def failed(cls, error: BaseException) -> CheckResult:
        return cls(ok=False, error=error)

    @property
    def message(self) -> str:
        """Diagnostic message; empty when the check passed."""
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """A raw row that could not be decoded and was skipped.

    Fields:
        trace_id: Trace id of the skipped row
        row_index: Position of the row within its trace group
        error_type: Exception class name raised by the decoder
        message: Exception message
    """

    trace_id: str
    row_index: int
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, trace_id: str, row_index: int, error: Exception) -> DecodeFailure:
        return cls(
            trace_id=trace_id,
            row_index=row_index,
            error_type=type(error).__name__,
            message=str(error),
        )


@dataclass(frozen=True, slots=True)
class TraceGroupOutcome:
    """Result of linking one trace group.

    `links` is the Linker's output verbatim. The remaining fields are the
    explicit diagnostic channel for rows that were skipped.
    """

    trace_id: str | None
    links: tuple[DependencyLink, ...]
    rows_seen: int
    spans_decoded: int
    decode_failures: tuple[DecodeFailure, ...] = ()

    @property
    def rows_skipped(self) -> int:
        return len(self.decode_failures)
