# src/tracelinks/engine/job.py
"""Dependencies job driver.

Partitions raw span rows by trace id, links each trace group in a
worker pool, and merges the per-trace links into one aggregate where
each (parent, child) edge appears once with summed counts.

Reading rows from storage and persisting the merged links stay with the
caller:

    job = DependenciesJob.from_settings(settings, decoder, linker_factory)
    result = job.run(rows)
    store.write_dependencies(day, result.links)
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from tracelinks.contracts import (
    DecodeFailure,
    Decoder,
    DependencyLink,
    LinkerFactory,
    RawRow,
    TraceGroupOutcome,
)
from tracelinks.core.config import JobSettings, TracelinksSettings
from tracelinks.core.logging import LogInitializer
from tracelinks.engine.trace_group import TraceGroupLinker

logger = structlog.get_logger(__name__)


def group_by_trace_id(rows: Iterable[RawRow]) -> dict[str, list[RawRow]]:
    """Partition rows into trace groups.

    Groups keep the order in which each trace id was first seen; rows
    keep their storage order within a group.
    """
    groups: dict[str, list[RawRow]] = {}
    for row in rows:
        groups.setdefault(row.trace_id, []).append(row)
    return groups


def merge_links(links: Iterable[DependencyLink]) -> list[DependencyLink]:
    """Sum call and error counts per (parent, child) edge.

    Returns:
        One link per edge, sorted by parent then child.
    """
    merged: dict[tuple[str, str], DependencyLink] = {}
    for link in links:
        existing = merged.get(link.key)
        merged[link.key] = link if existing is None else existing.merge(link)
    return [merged[key] for key in sorted(merged)]


@dataclass(frozen=True, slots=True)
class JobResult:
    """Merged links and diagnostics for one job run."""

    links: tuple[DependencyLink, ...]
    traces_processed: int
    rows_seen: int
    spans_decoded: int
    decode_failures: tuple[DecodeFailure, ...]

    @property
    def rows_skipped(self) -> int:
        return len(self.decode_failures)


class DependenciesJob:
    """Runs a TraceGroupLinker over every trace group of a batch.

    Thread pools share the driver process and therefore its logging
    initializer resource. Process pools pickle the transform to each
    worker, where LogInitializer builds that process's own resource.
    """

    def __init__(self, transform: TraceGroupLinker, settings: JobSettings | None = None) -> None:
        self._transform = transform
        self._settings = settings if settings is not None else JobSettings()

    @classmethod
    def from_settings(
        cls,
        settings: TracelinksSettings,
        decoder: Decoder,
        linker_factory: LinkerFactory,
    ) -> DependenciesJob:
        """Wire a job whose workers configure logging from `settings`."""
        initializer = LogInitializer(
            json_output=settings.logging.json_output,
            level=settings.logging.level,
        )
        return cls(TraceGroupLinker(decoder, linker_factory, initializer), settings.job)

    def _create_executor(self) -> Executor:
        if self._settings.executor == "process":
            return ProcessPoolExecutor(max_workers=self._settings.max_workers)
        return ThreadPoolExecutor(max_workers=self._settings.max_workers, thread_name_prefix="tracelinks")

    def run(self, rows: Iterable[RawRow]) -> JobResult:
        """Link every trace in `rows` and merge the results.

        Raises:
            Exception: Any Linker or initializer failure from a worker,
                unchanged. Row decode failures never raise.
        """
        groups = group_by_trace_id(rows)
        logger.info(
            "Linking trace groups",
            traces=len(groups),
            executor=self._settings.executor,
            max_workers=self._settings.max_workers,
        )

        with self._create_executor() as executor:
            outcomes: list[TraceGroupOutcome] = list(executor.map(self._transform.link_group, groups.values()))

        failures = tuple(failure for outcome in outcomes for failure in outcome.decode_failures)
        result = JobResult(
            links=tuple(merge_links(link for outcome in outcomes for link in outcome.links)),
            traces_processed=len(outcomes),
            rows_seen=sum(outcome.rows_seen for outcome in outcomes),
            spans_decoded=sum(outcome.spans_decoded for outcome in outcomes),
            decode_failures=failures,
        )
        self._log_summary(result)
        return result

    def _log_summary(self, result: JobResult) -> None:
        logger.info(
            "Dependency links computed",
            traces=result.traces_processed,
            rows=result.rows_seen,
            spans=result.spans_decoded,
            links=len(result.links),
            rows_skipped=result.rows_skipped,
        )
        if result.decode_failures:
            # Cap the listing so one corrupt partition doesn't flood the log
            limit = self._settings.max_logged_failures
            logger.warning(
                "Rows skipped due to decode failures",
                rows_skipped=result.rows_skipped,
                trace_ids=sorted({failure.trace_id for failure in result.decode_failures[:limit]}),
                truncated=result.rows_skipped > limit,
            )
