"""
=============================================================================
MIME TYPE RESOLUTION
=============================================================================

Maps file extensions to the Content-Type sent with a served file.

=============================================================================
WHAT IS A MIME TYPE?
=============================================================================

A MIME type tells the client how to interpret the response body.
They follow the format: type/subtype

    ┌────────────────────────────────────────────────────────────────────┐
    │                    EXTENSION → CONTENT-TYPE                        │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  /style.css        →  .css   →  text/css                           │
    │  /app.js           →  .js    →  text/javascript                    │
    │  /logo.PNG         →  .png   →  image/png     (case-insensitive)   │
    │  /README           →  ""     →  text/plain    (no extension)       │
    │  /data.xyz         →  .xyz   →  text/plain    (unknown)            │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The mapping is TOTAL: every input produces a type. Anything we do not
recognise falls back to DEFAULT_MIME_TYPE.

=============================================================================
WHY text/plain AS THE DEFAULT?
=============================================================================

Many servers default to application/octet-stream, which makes browsers
download the file. This server mostly hands out hand-written documents
from a small document root, so an unknown file is far more likely to be
readable text than an opaque binary. text/plain displays it inline.

=============================================================================
"""

from pathlib import PurePosixPath
from typing import Optional


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase extensions WITH the leading dot, the same form
# PurePosixPath.suffix produces.
#
# Content-Type values carry no charset parameter: the response writer sends
# them exactly as listed here.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT / DOCUMENTS
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",      # ES modules
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".map": "application/json",     # Source maps

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONTS
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # -------------------------------------------------------------------------
    # BINARY
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".wasm": "application/wasm",
}

# Unknown or missing extension
DEFAULT_MIME_TYPE = "text/plain"


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def mime_type(extension: Optional[str]) -> str:
    """
    Get the MIME type for a file extension.

    Args:
        extension: Extension with or without the leading dot, any case.
                   None or "" means "no extension".

    Returns:
        The mapped MIME type, or DEFAULT_MIME_TYPE.

    Examples:
        >>> mime_type(".css")
        'text/css'

        >>> mime_type("PNG")
        'image/png'

        >>> mime_type("xyz")
        'text/plain'

        >>> mime_type(None)
        'text/plain'
    """
    if not extension:
        return DEFAULT_MIME_TYPE

    extension = extension.lower()
    if not extension.startswith("."):
        extension = "." + extension

    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def extension_of(path: str) -> str:
    """
    Get the extension of the last segment of a URL path.

    Returns "" when the last segment has no extension:

        >>> extension_of("/css/style.css")
        '.css'

        >>> extension_of("/v1.2/README")
        ''
    """
    return PurePosixPath(path).suffix


def mime_type_for_path(path: str) -> str:
    """Get the MIME type for a URL path from its extension."""
    return mime_type(extension_of(path))
