"""
=============================================================================
HANDLERS MODULE
=============================================================================

Filesystem-facing request handling.

    StaticResolver / resolve()
      - Maps a request path to a file under the document root
      - "/" and directories → index file
      - Path traversal protection (segment-wise containment check)
      - MIME type from the requested extension

=============================================================================
USAGE
=============================================================================

    from tinyhttpd.handlers import StaticResolver

    resolver = StaticResolver("/var/www")
    with resolver.resolve("/style.css") as resource:
        ...

=============================================================================
"""

from .static import StaticResolver, resolve, is_within

__all__ = [
    "StaticResolver",
    "resolve",
    "is_within",
]
