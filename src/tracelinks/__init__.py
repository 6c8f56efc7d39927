"""
tracelinks: Service dependency links from stored distributed traces.

Decodes raw span rows grouped by trace id and reduces them into
directed parent/child service edges with call and error counts.
"""

__version__ = "0.1.0"
