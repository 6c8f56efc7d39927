"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to
core/engine/testing. Settings classes are NOT re-exported here; import
them from tracelinks.core.config.

Import patterns:
    from tracelinks.contracts import RawRow, Span, DependencyLink
    from tracelinks.contracts import Decoder, Linker, ResourceState
"""

from tracelinks.contracts.enums import ResourceState, ServicePhase, SpanKind
from tracelinks.contracts.errors import (
    ReentrantComputationError,
    ResourceClosedError,
    ResourceUnavailableError,
    ServiceStartError,
)
from tracelinks.contracts.protocols import (
    Decoder,
    HealthCheckedClient,
    Initializer,
    Linker,
    LinkerFactory,
    ServiceProcess,
)
from tracelinks.contracts.results import CheckResult, DecodeFailure, TraceGroupOutcome
from tracelinks.contracts.traces import DependencyLink, RawRow, Span, TraceGroup

__all__ = [
    "CheckResult",
    "DecodeFailure",
    "Decoder",
    "DependencyLink",
    "HealthCheckedClient",
    "Initializer",
    "Linker",
    "LinkerFactory",
    "RawRow",
    "ReentrantComputationError",
    "ResourceClosedError",
    "ResourceState",
    "ResourceUnavailableError",
    "ServicePhase",
    "ServiceProcess",
    "ServiceStartError",
    "Span",
    "SpanKind",
    "TraceGroup",
    "TraceGroupOutcome",
]
