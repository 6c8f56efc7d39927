"""Test support: lazily managed backing services.

Import patterns:
    from tracelinks.testing import ManagedServiceFixture
    from tracelinks.testing.elasticsearch import LazyElasticsearchHttpStorage
"""

from tracelinks.testing.docker import DockerContainer, HttpWaitStrategy
from tracelinks.testing.managed_service import ManagedServiceFixture

__all__ = [
    "DockerContainer",
    "HttpWaitStrategy",
    "ManagedServiceFixture",
]
