"""
Structured log sink.

Library: structlog pipeline + orjson rendering, with a Cloud Logging
compatible schema and an optional console renderer for development.
"""

from .core import LogFormat, StructuredSink, orjson_dumps, terminate
from .interceptors import RedirectStdLibHandler, install_stdlib_redirect
from .schema import LogSchema

__all__ = [
    "LogFormat",
    "LogSchema",
    "RedirectStdLibHandler",
    "StructuredSink",
    "install_stdlib_redirect",
    "orjson_dumps",
    "terminate",
]
