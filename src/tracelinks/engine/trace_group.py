# src/tracelinks/engine/trace_group.py
"""Per-trace decode-and-link transform.

TraceGroupLinker turns the raw rows of one trace into dependency links:

1. Run the process-local initializer, if any
2. Decode every row, skipping (and recording) rows that fail
3. Hand the surviving spans to a fresh Linker and return its links

A malformed row never fails its trace group. Each skipped row is logged
with its trace id and surfaced as a DecodeFailure on the outcome, so the
job driver can report exactly which rows were dropped.

Linker and initializer failures are NOT caught here - whether they are
fatal is the collaborator's policy.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from tracelinks.contracts import (
    DecodeFailure,
    Decoder,
    DependencyLink,
    Initializer,
    LinkerFactory,
    RawRow,
    Span,
    TraceGroupOutcome,
)

logger = structlog.get_logger(__name__)


class TraceGroupLinker:
    """Callable transform from one trace group to its dependency links.

    Holds no per-call state, so one instance can serve many groups
    concurrently. It pickles whenever its collaborators do, which lets a
    process pool ship it to workers.

    The initializer is invoked on every call. Making that cheap and
    exactly-once per process is the job of the LazyResource behind it
    (see tracelinks.core.logging.LogInitializer).

    Example:
        transform = TraceGroupLinker(decoder, linker_factory, LogInitializer())
        links = transform(rows_of_one_trace)
        outcome = transform.link_group(rows_of_one_trace)
        for failure in outcome.decode_failures:
            ...
    """

    def __init__(
        self,
        decoder: Decoder,
        linker_factory: LinkerFactory,
        initializer: Initializer | None = None,
    ) -> None:
        self.decoder = decoder
        self.linker_factory = linker_factory
        self.initializer = initializer

    def __call__(self, rows: Iterable[RawRow]) -> list[DependencyLink]:
        return list(self.link_group(rows).links)

    def link_group(self, rows: Iterable[RawRow]) -> TraceGroupOutcome:
        """Decode and link one trace group.

        Args:
            rows: Rows sharing one trace id, in storage order. The shared
                trace id is assumed, not re-validated.

        Returns:
            TraceGroupOutcome with the Linker's links verbatim and the
            rows that were skipped.
        """
        if self.initializer is not None:
            self.initializer()

        spans: list[Span] = []
        failures: list[DecodeFailure] = []
        trace_id: str | None = None
        rows_seen = 0

        for row_index, row in enumerate(rows):
            rows_seen += 1
            if trace_id is None:
                trace_id = row.trace_id
            # Decode into scratch so a row that fails halfway contributes nothing
            decoded: list[Span] = []
            try:
                self.decoder.decode_into(row.encoded_span, decoded)
            except Exception as e:
                failures.append(DecodeFailure.from_exception(row.trace_id, row_index, e))
                logger.warning(
                    "Unable to decode span from trace",
                    trace_id=row.trace_id,
                    row_index=row_index,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue
            spans.extend(decoded)

        linker = self.linker_factory()
        linker.put_trace(spans)
        links = linker.link()

        return TraceGroupOutcome(
            trace_id=trace_id,
            links=tuple(links),
            rows_seen=rows_seen,
            spans_decoded=len(spans),
            decode_failures=tuple(failures),
        )

    def __repr__(self) -> str:
        return (
            f"TraceGroupLinker(decoder={self.decoder!r}, "
            f"linker_factory={self.linker_factory!r}, initializer={self.initializer!r})"
        )


def link(
    group: Iterable[RawRow],
    decoder: Decoder,
    initializer: Initializer | None = None,
    *,
    linker_factory: LinkerFactory,
) -> list[DependencyLink]:
    """Decode and link one trace group in a single call.

    Equivalent to TraceGroupLinker(decoder, linker_factory, initializer)(group).
    """
    return TraceGroupLinker(decoder, linker_factory, initializer)(group)
