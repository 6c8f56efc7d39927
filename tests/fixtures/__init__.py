# tests/fixtures/__init__.py
"""Shared pytest fixtures for tracelinks tests.

Available fixtures:
- elasticsearch_storage: health-checked Elasticsearch storage (skips if unavailable)
"""

from tests.fixtures.elasticsearch import elasticsearch_storage

__all__ = [
    "elasticsearch_storage",
]
