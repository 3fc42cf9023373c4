"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m tinyhttpd --root ./public                       │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DOCUMENT_ROOT=./public python -m tinyhttpd           │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TWO MODES
=============================================================================

    document_root = None     → every request gets "Hello, World!"
    document_root = "./www"  → files are served from ./www

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog

    LIMITS
    - max_request_size, timeout, write_timeout, chunk_size

    CONTENT
    - document_root, index_file, greeting, include_content_length

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 10
    """Maximum number of queued connections waiting for accept()."""

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 4096
    """
    Largest request (request line + headers) accepted, in bytes.
    Anything bigger is answered with 413, never truncated.
    """

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for reading the request.
    None = blocking (a silent client would stall the server forever).
    """

    write_timeout: Optional[float] = 60.0
    """Seconds allowed for streaming one response body. None = no limit."""

    chunk_size: int = 8192
    """Bytes read from a served file per send."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: Optional[str] = None
    """
    Directory to serve files from.
    None = greeting mode (no file serving).
    """

    index_file: str = "index.html"
    """Default document for "/" and for directory requests."""

    greeting: str = "Hello, World!"
    """Body of the canned response in greeting mode."""

    include_content_length: bool = False
    """Send Content-Length with served files."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also dumps every parsed request.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST              Server host (default: 127.0.0.1)
        HTTP_PORT              Server port (default: 8080)
        HTTP_DOCUMENT_ROOT     Directory to serve (default: greeting mode)
        HTTP_INDEX_FILE        Default document (default: index.html)
        HTTP_MAX_REQUEST_SIZE  Request size limit in bytes (default: 4096)
        HTTP_TIMEOUT           Read timeout in seconds (default: 30)
        HTTP_WRITE_TIMEOUT     Body streaming timeout (default: 60)
        HTTP_LOG_LEVEL         Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            document_root=os.getenv("HTTP_DOCUMENT_ROOT"),
            index_file=os.getenv("HTTP_INDEX_FILE", "index.html"),
            max_request_size=int(os.getenv("HTTP_MAX_REQUEST_SIZE", "4096")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            write_timeout=float(os.getenv("HTTP_WRITE_TIMEOUT", "60")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    @property
    def serves_files(self) -> bool:
        """True when a document root is configured."""
        return self.document_root is not None

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately, not on
        the first request that happens to need it.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_request_size < 16:
            raise ValueError("max_request_size must be >= 16")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.write_timeout is not None and self.write_timeout <= 0:
            raise ValueError("write_timeout must be > 0")

        if not self.index_file or "/" in self.index_file:
            raise ValueError(f"Invalid index_file: {self.index_file!r}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.document_root is not None and not os.path.isdir(self.document_root):
            raise ValueError(f"Document root is not a directory: {self.document_root}")
