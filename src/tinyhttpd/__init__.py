"""
=============================================================================
TINYHTTPD - A Minimal HTTP/1.1 Server Built From Raw Sockets
=============================================================================

Answers one request per connection, either with a fixed greeting or with
a file from a document root, and never lets a request escape that root.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      TINYHTTPD ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. TRANSPORT (core/)                                              │
    │      - TCP listen/accept, one connection at a time                  │
    │      - Bounded reads: size limit and read deadline                  │
    │                                                                      │
    │   2. REQUEST PARSING (http/request.py)                              │
    │      - Two-state machine: request line, then headers                │
    │      - Total: any bytes in, a Request out, never an exception       │
    │                                                                      │
    │   3. RESOURCE RESOLUTION (handlers/static.py)                       │
    │      - URL path → canonical file inside the document root           │
    │      - Traversal and symlink escapes answered with 403              │
    │                                                                      │
    │   4. RESPONSE WRITING (http/response.py)                            │
    │      - Status line, Content-Type, blank line, streamed body         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttpd)
    ├── server.py            # HTTPServer: read → parse → resolve → write
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # One client socket
    ├── http/
    │   ├── request.py       # Request parser
    │   ├── resource.py      # ResolvedResource result type
    │   ├── response.py      # Response writer
    │   ├── status_codes.py  # HTTP status enum
    │   └── mime_types.py    # Extension → MIME type
    └── handlers/
        └── static.py        # Document-root resolver

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(document_root="./public", port=8080)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
