"""
=============================================================================
MIME TYPE REGISTRY
=============================================================================

Maps file extensions to the Content-Type sent with a resource.

=============================================================================
HOW THE TABLE IS BUILT
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                    LAZY, BUILD-ONCE TABLE                          │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   first lookup()  ──► lock ──► table built? ──no──► load ──┐       │
    │                                    │                        │       │
    │                                   yes                       │       │
    │                                    ▼                        ▼       │
    │   later lookups   ───────────► read-only dict ◄─────── publish     │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The table comes from MIME_TYPES below (versioned by MIME_TABLE_VERSION)
unless a JSON file is configured. A configured file that is missing or
broken is not fatal: the table shrinks to just the ``default`` entry and a
warning is logged.

Keys are lowercase extensions WITHOUT the leading dot. ``"CSS"``, ``".css"``
and ``"css"`` all look up the same entry.
=============================================================================
"""

import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union


logger = logging.getLogger(__name__)


MIME_TABLE_VERSION = "1.0.0"

# Default MIME type for unknown extensions
# application/octet-stream = "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"

DEFAULT_KEY = "default"


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/vnd.microsoft.icon",
    "webp": "image/webp",
    "avif": "image/avif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO
    # -------------------------------------------------------------------------
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "opus": "audio/opus",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",

    # -------------------------------------------------------------------------
    # DOCUMENTS / ARCHIVES
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "wasm": "application/wasm",

    # -------------------------------------------------------------------------
    # SOURCE CODE
    # -------------------------------------------------------------------------
    # Dynamic scripts never reach this entry: the dispatcher forces text/html
    # for the configured script extension.
    "py": "text/x-python",

    DEFAULT_KEY: DEFAULT_MIME_TYPE,
}


def normalize_extension(extension: Optional[str]) -> str:
    """
    Normalize an extension for table keys.

        >>> normalize_extension(".PNG")
        'png'
        >>> normalize_extension(None)
        ''
    """
    if not extension:
        return ""
    return extension.lstrip(".").lower()


class MimeRegistry:
    """
    Extension → MIME type lookup with a lazily built, immutable table.

    Usage:
        registry = MimeRegistry()
        registry.lookup("css")          # 'text/css'
        registry.lookup("")             # 'application/octet-stream'
        registry.lookup_path("a/b.PNG") # 'image/png'

    Construction is cheap; the table is only built by the first lookup.
    Concurrent first lookups are serialized by a lock, so every caller sees
    the same fully built table.
    """

    def __init__(
        self,
        source: Optional[Union[str, Path]] = None,
        table: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            source: Optional JSON file holding an ``{extension: type}`` object.
                    When None, the built-in MIME_TYPES table is used.
            table: Explicit table (mainly for tests). Takes precedence
                   over ``source``.
        """
        self._source = Path(source) if source is not None else None
        self._explicit = table
        self._table: Optional[Mapping[str, str]] = None
        self._lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────
    # LOADING
    # ─────────────────────────────────────────────────────────────────────

    @property
    def table(self) -> Mapping[str, str]:
        """The loaded table (read-only view). Builds it on first access."""
        if self._table is None:
            with self._lock:
                if self._table is None:
                    self._table = MappingProxyType(self._build())
        return self._table

    @property
    def loaded(self) -> bool:
        return self._table is not None

    @property
    def version(self) -> str:
        """Version of the table definition in use."""
        if self._explicit is not None or self._source is not None:
            return "custom"
        return MIME_TABLE_VERSION

    def _build(self) -> Dict[str, str]:
        if self._explicit is not None:
            raw = dict(self._explicit)
        elif self._source is not None:
            raw = self._read_source(self._source)
        else:
            raw = dict(MIME_TYPES)

        table = {
            normalize_extension(ext): mime
            for ext, mime in raw.items()
            if normalize_extension(ext) and isinstance(mime, str)
        }
        table.setdefault(DEFAULT_KEY, DEFAULT_MIME_TYPE)
        logger.debug(f"MIME table loaded ({len(table)} entries, version {self.version})")
        return table

    def _read_source(self, path: Path) -> Dict[str, str]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"MIME types file not found: {path}")
            return {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"MIME types file unreadable: {path} ({e})")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"MIME types file must hold a JSON object: {path}")
            return {}
        return data

    # ─────────────────────────────────────────────────────────────────────
    # LOOKUP
    # ─────────────────────────────────────────────────────────────────────

    @property
    def default(self) -> str:
        return self.table[DEFAULT_KEY]

    def lookup(self, extension: Optional[str]) -> str:
        """
        Get the MIME type for an extension.

        Never raises: empty or unknown extensions get the ``default`` entry.

        Args:
            extension: Extension with or without the leading dot, any case.

        Returns:
            The MIME type string.
        """
        key = normalize_extension(extension)
        table = self.table
        if not key or key == DEFAULT_KEY:
            return table[DEFAULT_KEY]
        return table.get(key, table[DEFAULT_KEY])

    def lookup_path(self, path: Union[str, Path]) -> str:
        """Get the MIME type for a file path, based on its suffix."""
        return self.lookup(Path(path).suffix)

    def extensions(self) -> list[str]:
        """All known extensions, sorted, without the ``default`` key."""
        return sorted(ext for ext in self.table if ext != DEFAULT_KEY)

    def __contains__(self, extension: str) -> bool:
        key = normalize_extension(extension)
        return bool(key) and key != DEFAULT_KEY and key in self.table
