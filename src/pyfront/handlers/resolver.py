"""
=============================================================================
PATH RESOLVER
=============================================================================

Turns a request-target into a file inside the public root.

=============================================================================
RESOLUTION RULES
=============================================================================

    Request                    Resolves to                      Flags
    ───────                    ───────────                      ─────
    /                          public/index.py                  index, dynamic
    /docs/                     public/docs/index.py             index, dynamic
    /docs                      public/docs/index.py             index, dynamic
    /about                     public/about/index.py            index, dynamic
    /style.css                 public/style.css                 -
    /style.css/                public/style.css                 - (slash ignored on files)
    /app.py?x=1                public/app.py                    dynamic
    /../etc/passwd             None (not found)                 traversal logged

A request is sent to the index file when the candidate is a directory OR has
no extension at all. Whether that file exists is not the resolver's concern;
the dispatcher checks accessibility and answers 404.

=============================================================================
PATH TRAVERSAL
=============================================================================

An attacker asks for ``/../../etc/passwd`` (or ``/%2e%2e/...``) hoping the
server joins it onto the root without checking. Two checks close this:

    1. After percent-decoding, any ``..`` segment or NUL byte is rejected.
    2. The joined path is normalized and must still be inside the root:

        candidate.relative_to(public_root)   # Raises if outside root!

Symlinks are not followed; the check is lexical.
=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from ..http.request import split_target


logger = logging.getLogger(__name__)


class PathTraversalError(ValueError):
    """A request path tried to leave the public root."""

    def __init__(self, request_path: str):
        super().__init__(f"Path traversal attempt: {request_path!r}")
        self.request_path = request_path


@dataclass(frozen=True)
class ResolvedResource:
    """
    Where a request landed on disk.

    Attributes:
        path: Absolute filesystem path (may not exist).
        is_dynamic: True if the path has the script extension.
        is_index_fallback: True if the index filename was substituted.
    """

    path: Path
    is_dynamic: bool = False
    is_index_fallback: bool = False

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".").lower()


class PathResolver:
    """
    Resolves request-targets against a sandboxed public root.

    Usage:
        resolver = PathResolver("/var/www/site/public")
        resource = resolver.resolve("/docs/?page=2")
        if resource is None:
            ...  # traversal attempt, answer 404
    """

    def __init__(
        self,
        public_root: Union[str, Path],
        index_file: str = "index.py",
        dynamic_extension: Optional[str] = None,
    ):
        """
        Args:
            public_root: Directory all resolved paths must stay inside.
            index_file: Filename substituted for directory requests.
            dynamic_extension: Script extension without the dot.
                               Defaults to the index file's extension.
        """
        # Resolve to absolute path (the containment check compares against it)
        self.public_root = Path(public_root).resolve()
        self.index_file = index_file
        ext = dynamic_extension or Path(index_file).suffix
        self.dynamic_extension = ext.lstrip(".").lower()

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def resolve(
        self,
        request_path: str,
        public_root: Optional[Union[str, Path]] = None,
    ) -> Optional[ResolvedResource]:
        """
        Resolve a request-target to a resource.

        Args:
            request_path: Path plus optional query string / fragment.
            public_root: Override the configured root for this call.

        Returns:
            The resolved resource, or None when the path is rejected.
        """
        root = Path(public_root).resolve() if public_root is not None else self.public_root

        try:
            candidate = self._join(root, request_path)
        except PathTraversalError as e:
            logger.warning(str(e))
            return None

        is_index_fallback = False
        if candidate.is_dir() or not candidate.suffix:
            candidate = candidate / self.index_file
            is_index_fallback = True

        return ResolvedResource(
            path=candidate,
            is_dynamic=candidate.suffix.lstrip(".").lower() == self.dynamic_extension,
            is_index_fallback=is_index_fallback,
        )

    def _join(self, root: Path, request_path: str) -> Path:
        # ─────────────────────────────────────────────────────────────────
        # KEEP ONLY THE PATH COMPONENT, DECODED ONCE
        # ─────────────────────────────────────────────────────────────────
        path = unquote(split_target(request_path or "/")[0])

        if "\x00" in path:
            raise PathTraversalError(request_path)

        segments = [s for s in path.replace("\\", "/").split("/") if s]
        if any(s == ".." for s in segments):
            raise PathTraversalError(request_path)

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: CONTAINMENT CHECK
        # ─────────────────────────────────────────────────────────────────
        candidate = Path(os.path.normpath(root.joinpath(*segments)))
        try:
            candidate.relative_to(root)
        except ValueError:
            raise PathTraversalError(request_path) from None
        return candidate

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def is_accessible(path: Union[str, Path]) -> bool:
        """True if ``path`` exists, is a regular file, and is readable."""
        path = Path(path)
        return path.is_file() and os.access(path, os.R_OK)

    def has_index(self, directory: Union[str, Path]) -> bool:
        """True if ``directory`` contains the index file."""
        directory = Path(directory)
        return directory.is_dir() and (directory / self.index_file).is_file()

    def is_index(self, request_path: str) -> bool:
        """True if the request lands on an accessible index file."""
        resource = self.resolve(request_path)
        return (
            resource is not None
            and resource.path.name == self.index_file
            and self.is_accessible(resource.path)
        )
