"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The transport layer: raw bytes in, raw bytes out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ SocketServer (socket_server.py)                                     │
    │   bind, listen, accept; one connection at a time                    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ Connection (connection.py)                                          │
    │   bounded read of one request, sendall, graceful close              │
    └─────────────────────────────────────────────────────────────────────┘

No HTTP knowledge lives here beyond "a header block ends with a blank
line".

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, ConnectionReadError

__all__ = [
    "SocketServer",          # Accepts connections
    "Connection",            # Wrapper for a client socket
    "ConnectionState",       # Connection lifecycle states
    "ConnectionReadError",   # Socket failure while reading
]
