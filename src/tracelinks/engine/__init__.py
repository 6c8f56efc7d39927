"""Dependencies engine: per-trace linking and the job driver."""

from tracelinks.engine.job import DependenciesJob, JobResult, group_by_trace_id, merge_links
from tracelinks.engine.trace_group import TraceGroupLinker, link

__all__ = [
    "DependenciesJob",
    "JobResult",
    "TraceGroupLinker",
    "group_by_trace_id",
    "link",
    "merge_links",
]
