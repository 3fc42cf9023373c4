"""
=============================================================================
STATIC RESOURCE RESOLVER
=============================================================================

Maps a request path onto a file beneath the document root, without ever
letting the request escape that root.

=============================================================================
RESOLUTION STEPS
=============================================================================

    Request path: "/css/../style.css?v=3"
         │
         ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 1. Keep the path part, percent-decode       → "/css/../style.css"  │
    │ 2. "/" becomes "/index.html"                                        │
    │ 3. Join with root, minus leading "/"        → root/css/../style.css│
    │ 4. Canonicalize (.., symlinks)              → /srv/www/style.css   │
    │      └─ does not exist?               → NOT_FOUND                  │
    │ 5. Canonicalize the root itself             → /srv/www             │
    │      └─ root is gone?                 → SERVER_ERROR               │
    │ 6. Containment: still under the root?                              │
    │      └─ no                            → FORBIDDEN                  │
    │ 7. Directory? use its index file, check 4 and 6 again              │
    │ 8. Open for reading                                                 │
    │      └─ cannot open                   → NOT_FOUND                  │
    │ 9. MIME type from the REQUESTED path's extension                   │
    └─────────────────────────────────────────────────────────────────────┘
         │
         ▼
    ResolvedResource.ok(handle, "text/css")

=============================================================================
PATH TRAVERSAL AND THE CONTAINMENT CHECK
=============================================================================

A request like GET /../../etc/passwd tries to climb out of the document
root. Canonicalizing first collapses every "..", and follows every
symlink, so the check only ever sees the REAL location of the file.

The check compares whole path SEGMENTS, not characters:

    root      = /srv/web
    resolved  = /srv/webhook/secret.txt

    startswith("/srv/web")   → True   ✗ would leak the sibling directory
    relative_to("/srv/web")  → error  ✓ FORBIDDEN

A plain string-prefix test lets any sibling directory whose name starts
with the root's name through. Path.relative_to() only succeeds when the
root is a true ancestor (or the path itself).

=============================================================================
INTERVIEW QUESTIONS ABOUT STATIC FILES
=============================================================================

Q: "Why canonicalize the root on every request?"
A: "The root can be renamed, deleted or re-pointed by a symlink while the
   server runs. Resolving it per request means a broken root shows up as
   a 500 on that request instead of a stale answer."

Q: "Why take the MIME type from the requested path?"
A: "It is what the client asked for. /latest.css may be a symlink to
   css/v42.css.bak; the client still expects text/css."

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from ..http.mime_types import mime_type_for_path
from ..http.resource import ResolvedResource


logger = logging.getLogger(__name__)


def is_within(path: Path, root: Path) -> bool:
    """
    Check that canonical `path` is `root` or lies below it.

    Both arguments must already be canonical (Path.resolve()).
    Segment-wise: /srv/webhook is NOT within /srv/web.
    """
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


class StaticResolver:
    """
    Resolves request paths to open files under a document root.

    =========================================================================
    USAGE
    =========================================================================

        resolver = StaticResolver("/var/www", index_file="index.html")

        with resolver.resolve("/style.css") as resource:
            if resource.is_ok:
                data = resource.file.read()

    =========================================================================
    THREAD SAFETY
    =========================================================================

    resolve() keeps all of its state in local variables. The instance
    only holds configuration, so one resolver can serve any number of
    connections at once.

    =========================================================================
    """

    def __init__(self, document_root: str, index_file: str = "index.html"):
        """
        Args:
            document_root: Directory to serve from. Kept as given and
                           canonicalized on every resolve() call.
            index_file:    Default document for "/" and for directories.
        """
        self.document_root = Path(document_root)
        self.index_file = index_file

    def resolve(self, requested_path: str) -> ResolvedResource:
        """
        Resolve a request path.

        Args:
            requested_path: The path token from the request line.

        Returns:
            A ResolvedResource; only OK results hold an open file handle.
        """
        url_path = self._url_path(requested_path)
        if url_path == "/":
            url_path = "/" + self.index_file

        # ─────────────────────────────────────────────────────────────────
        # CANONICALIZE THE REQUESTED FILE
        # ─────────────────────────────────────────────────────────────────
        canonical = self._canonicalize(self.document_root / url_path.lstrip("/"))
        if canonical is None:
            logger.debug(f"Not found: {requested_path!r}")
            return ResolvedResource.not_found()

        # ─────────────────────────────────────────────────────────────────
        # CANONICALIZE THE ROOT
        # ─────────────────────────────────────────────────────────────────
        root = self._canonicalize(self.document_root)
        if root is None:
            logger.error(f"Document root cannot be resolved: {self.document_root}")
            return ResolvedResource.server_error()

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: CONTAINMENT CHECK
        # ─────────────────────────────────────────────────────────────────
        if not is_within(canonical, root):
            logger.warning(f"Path traversal attempt: {requested_path!r} -> {canonical}")
            return ResolvedResource.forbidden()

        # ─────────────────────────────────────────────────────────────────
        # DIRECTORY → INDEX FILE
        # ─────────────────────────────────────────────────────────────────
        # The index file may itself be a symlink, so it gets the full
        # canonicalize + containment treatment again.
        if canonical.is_dir():
            url_path = url_path.rstrip("/") + "/" + self.index_file
            canonical = self._canonicalize(canonical / self.index_file)
            if canonical is None:
                logger.debug(f"No index file for directory {requested_path!r}")
                return ResolvedResource.not_found()
            if not is_within(canonical, root):
                logger.warning(f"Index file escapes document root: {canonical}")
                return ResolvedResource.forbidden()

        # ─────────────────────────────────────────────────────────────────
        # REGULAR FILES ONLY
        # ─────────────────────────────────────────────────────────────────
        # open() on a FIFO blocks until a writer shows up.
        if not canonical.is_file():
            logger.info(f"Not a regular file: {canonical}")
            return ResolvedResource.not_found()

        # ─────────────────────────────────────────────────────────────────
        # OPEN
        # ─────────────────────────────────────────────────────────────────
        try:
            file = open(canonical, "rb")
        except OSError as e:
            logger.info(f"Cannot open {canonical}: {e}")
            return ResolvedResource.not_found()

        return ResolvedResource.ok(file, mime_type_for_path(url_path), canonical)

    @staticmethod
    def _url_path(requested_path: str) -> str:
        """
        Strip query string and fragment, then percent-decode.

        "/a%20b.txt?x=1" → "/a b.txt"
        """
        path = requested_path.partition("?")[0].partition("#")[0]
        return unquote(path)

    @staticmethod
    def _canonicalize(path: Path) -> Optional[Path]:
        """
        Absolute, symlink- and ..-free form of an EXISTING path.

        Returns None when the path does not exist or cannot be resolved
        (embedded NUL byte, symlink loop, permission error).
        """
        try:
            return path.resolve(strict=True)
        except (OSError, RuntimeError, ValueError):
            return None


def resolve(
    requested_path: str,
    document_root: str,
    index_file: str = "index.html",
) -> ResolvedResource:
    """
    Resolve one request path without keeping a resolver around.

    Example:
        with resolve("/style.css", "/var/www") as resource:
            ...
    """
    return StaticResolver(document_root, index_file).resolve(requested_path)
