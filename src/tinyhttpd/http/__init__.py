"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between "bytes arrived" and "bytes to send", with no sockets
and no filesystem policy.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST (request.py)                                                │
    │   b"GET /x HTTP/1.1\r\nHost: a\r\n\r\n"                            │
    │      → Request(method="GET", path="/x", version="HTTP/1.1")        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESOURCE (resource.py)                                              │
    │   ResolvedResource: OK | NOT_FOUND | FORBIDDEN | SERVER_ERROR       │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │   ResponseWriter → b"HTTP/1.1 200 OK\r\nContent-Type: ...\r\n\r\n" │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py), MIME TYPES (mime_types.py)          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    Request,
    RecognizedHeaders,
    RequestParser,
    RequestTooLarge,
    ParseState,
    parse_request,
)
from .resource import ResolvedResource, ResourceStatus
from .response import (
    ResponseWriter,
    ResponseWriteError,
    ResponseTimeout,
    DEFAULT_GREETING,
    status_line,
)
from .status_codes import HTTPStatus
from .mime_types import mime_type, mime_type_for_path, DEFAULT_MIME_TYPE

__all__ = [
    # Request parsing
    "Request",
    "RecognizedHeaders",
    "RequestParser",
    "RequestTooLarge",
    "ParseState",
    "parse_request",

    # Resolution result
    "ResolvedResource",
    "ResourceStatus",

    # Response writing
    "ResponseWriter",
    "ResponseWriteError",
    "ResponseTimeout",
    "DEFAULT_GREETING",
    "status_line",

    # Status codes
    "HTTPStatus",

    # MIME types
    "mime_type",
    "mime_type_for_path",
    "DEFAULT_MIME_TYPE",
]
