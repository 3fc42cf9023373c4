"""
=============================================================================
RESOLVED RESOURCE
=============================================================================

The outcome of looking a request path up under the document root.

    ┌──────────────┬─────────────────────────────────┬──────────────────┐
    │ Status       │ Meaning                         │ Carries          │
    ├──────────────┼─────────────────────────────────┼──────────────────┤
    │ OK           │ File found, inside root, opened │ handle, MIME     │
    │ NOT_FOUND    │ Missing, or could not be opened │ -                │
    │ FORBIDDEN    │ Resolves outside the root       │ -                │
    │ SERVER_ERROR │ The root itself is unusable     │ -                │
    └──────────────┴─────────────────────────────────┴──────────────────┘

A tagged result instead of an exception or an error code: the resolver
decides WHICH outcome, the response writer decides how each outcome looks
on the wire.

Ownership: a ResolvedResource is produced once per request, consumed once
by the writer and never kept. Use it as a context manager so the file
handle is released on every path:

    with resolver.resolve(request.path) as resource:
        writer.write_resource(resource)

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional


class ResourceStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"


@dataclass
class ResolvedResource:
    """
    Result of StaticResolver.resolve().

    Only OK results carry a file handle and a MIME type.
    Build instances with the classmethods rather than the constructor.
    """

    status: ResourceStatus
    file: Optional[BinaryIO] = None
    mime_type: Optional[str] = None
    path: Optional[Path] = None  # canonical path, for logging

    @classmethod
    def ok(cls, file: BinaryIO, mime_type: str, path: Path) -> "ResolvedResource":
        return cls(ResourceStatus.OK, file=file, mime_type=mime_type, path=path)

    @classmethod
    def not_found(cls) -> "ResolvedResource":
        return cls(ResourceStatus.NOT_FOUND)

    @classmethod
    def forbidden(cls) -> "ResolvedResource":
        return cls(ResourceStatus.FORBIDDEN)

    @classmethod
    def server_error(cls) -> "ResolvedResource":
        return cls(ResourceStatus.SERVER_ERROR)

    @property
    def is_ok(self) -> bool:
        return self.status is ResourceStatus.OK

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        if self.file is not None:
            self.file.close()
            self.file = None

    def __enter__(self) -> "ResolvedResource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
