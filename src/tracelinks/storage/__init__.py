"""Storage handles used by dependencies jobs and their fixtures."""

from tracelinks.storage.elasticsearch import ElasticsearchHttpStorage

__all__ = ["ElasticsearchHttpStorage"]
