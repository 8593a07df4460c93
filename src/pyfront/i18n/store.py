"""
Translation tables, one per language code, loaded from the translations
directory.

File formats, checked in this order for a code such as ``fr``:

    fr.json   {"greeting": "Bonjour", "menu": {"home": "Accueil"}}
    fr.lang   greeting = Bonjour
    fr.spl    reserved; loads as an empty table

The first file that exists wins and its extension alone decides how it is
parsed. A broken ``fr.json`` gives an empty table and a warning; it is never
re-read as ``key=value`` text.
"""

import json
import logging
import re
import threading
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


logger = logging.getLogger(__name__)


FORMAT_EXTENSIONS = ("json", "lang", "spl")

# Extensions that make a code show up as available.
AVAILABLE_EXTENSIONS = ("json", "lang")

LANGUAGE_CODE = re.compile(r"^[A-Za-z0-9_-]+$")

# (store, code, table). The table is this request's own copy; several stores
# in one process never see each other's active language.
_active_language: ContextVar[Optional[Tuple["TranslationStore", str, Dict[str, str]]]] = ContextVar(
    "pyfront_active_language", default=None
)

# (path, mtime_ns, size) of the file a table was read from, None when no
# file existed.
Signature = Optional[Tuple[str, int, int]]


def is_valid_code(code: Optional[str]) -> bool:
    return bool(code) and LANGUAGE_CODE.match(code) is not None


# =============================================================================
# PARSERS
# =============================================================================

def parse_json(content: str, source: str = "<string>") -> Dict[str, str]:
    """
    Parse a JSON translation document.

    Nested objects are flattened into dotted keys; scalars are stringified.
    Anything that is not a JSON object yields an empty table.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON in translation file {source}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Translation file {source} must hold a JSON object")
        return {}
    return _flatten(data)


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    table: Dict[str, str] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            table.update(_flatten(value, f"{name}."))
        elif value is None:
            table[name] = ""
        elif isinstance(value, bool):
            table[name] = "true" if value else "false"
        else:
            table[name] = str(value)
    return table


def parse_lang(content: str) -> Dict[str, str]:
    """
    Parse ``key=value`` lines.

    Split on the first ``=``; key and value are stripped. Lines without
    ``=`` are ignored.

        >>> parse_lang("a = 1\\nb=x=y\\nnoise")
        {'a': '1', 'b': 'x=y'}
    """
    table: Dict[str, str] = {}
    for line in content.splitlines():
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        table[key.strip()] = value.strip()
    return table


def parse_spl(content: str) -> Dict[str, str]:
    """Reserved format. Always empty."""
    return {}


PARSERS = {
    "json": parse_json,
    "lang": lambda content, source="<string>": parse_lang(content),
    "spl": lambda content, source="<string>": parse_spl(content),
}


# =============================================================================
# STORE
# =============================================================================

class TranslationStore:
    """
    Process-wide cache of translation tables with a request-local active
    language.

    Usage:
        store = TranslationStore("/site/private/vocabulary")
        store.activate("fr")
        store.get("greeting")        # "Bonjour"
        store.get("missing")         # None
        store.set("greeting", "Salut")

    ┌─────────────────────────────────────────────────────────────────────┐
    │  cache (shared)           code → (file signature, parsed table)     │
    │  active (per request)     code + a private copy of that table       │
    └─────────────────────────────────────────────────────────────────────┘

    ``load()`` always re-reads the file. ``activate()`` re-reads only when
    the file's mtime or size changed (or it appeared/disappeared) since the
    cached read. ``set()`` writes into the request's copy, so the cache and
    other requests never see it.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self._tables: Dict[str, Tuple[Signature, Dict[str, str]]] = {}
        self._lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────
    # FILE LOOKUP
    # ─────────────────────────────────────────────────────────────────────

    def find_file(self, code: str) -> Optional[Path]:
        """The file that would be loaded for ``code``, if any."""
        if not is_valid_code(code):
            return None
        for ext in FORMAT_EXTENSIONS:
            path = self.directory / f"{code}.{ext}"
            if path.is_file():
                return path
        return None

    def signature(self, code: str) -> Signature:
        path = self.find_file(code)
        if path is None:
            return None
        try:
            stat = path.stat()
        except OSError:
            return None
        return (str(path), stat.st_mtime_ns, stat.st_size)

    def read_table(self, code: str) -> Dict[str, str]:
        """Parse the file for ``code`` without touching the cache."""
        if not is_valid_code(code):
            logger.warning(f"Rejected language code {code!r}")
            return {}

        path = self.find_file(code)
        if path is None:
            logger.debug(f"No translation file for {code!r} in {self.directory}")
            return {}

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read translation file {path}: {e}")
            return {}

        ext = path.suffix.lstrip(".")
        if ext == "spl":
            logger.debug(f"{path.name}: .spl translations are not supported yet")
        return PARSERS[ext](content, source=str(path))

    # ─────────────────────────────────────────────────────────────────────
    # ACTIVE LANGUAGE
    # ─────────────────────────────────────────────────────────────────────

    def load(self, code: str) -> Dict[str, str]:
        """
        (Re)load ``code`` from disk, replacing its cached table, and make it
        the active language.

        Returns:
            The request's copy of the table. Invalid codes return an empty
            table and change nothing.
        """
        if not is_valid_code(code):
            logger.warning(f"Rejected language code {code!r}")
            return {}

        signature = self.signature(code)
        table = self.read_table(code)
        with self._lock:
            self._tables[code] = (signature, table)
        logger.debug(f"Loaded {len(table)} translations for {code!r}")
        return self._make_active(code, table)

    def activate(self, code: str) -> None:
        """Make ``code`` active, reloading it when its file changed on disk."""
        with self._lock:
            cached = self._tables.get(code)
        if cached is not None and cached[0] == self.signature(code):
            self._make_active(code, cached[1])
        else:
            self.load(code)

    def _make_active(self, code: str, table: Dict[str, str]) -> Dict[str, str]:
        local = dict(table)
        _active_language.set((self, code, local))
        return local

    @property
    def language(self) -> Optional[str]:
        """Active language for the current request, or None."""
        active = _active_language.get()
        if active is None or active[0] is not self:
            return None
        return active[1]

    @property
    def table(self) -> Dict[str, str]:
        """The request's active table. Empty when no language is active."""
        active = _active_language.get()
        if active is None or active[0] is not self:
            return {}
        return active[2]

    def loaded_languages(self) -> List[str]:
        return sorted(self._tables)

    def clear(self) -> None:
        """Drop every cached table."""
        with self._lock:
            self._tables.clear()

    # ─────────────────────────────────────────────────────────────────────
    # KEYS
    # ─────────────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[str]:
        """Translated value, or None when the key is absent."""
        return self.table.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Set a key in the current request's table. Memory only: neither the
        file nor the shared cache changes.

        With no active language the value goes nowhere and a warning is
        logged.
        """
        if self.language is None:
            logger.warning(f"No active language, dropping translation {key!r}")
            return
        self.table[key] = value

    def translate(self, key: str, default: Optional[str] = None, **params: Any) -> str:
        """
        Value for ``key``, falling back to ``default`` then the key itself.
        ``{name}`` placeholders are filled from ``params``.
        """
        text = self.get(key)
        if text is None:
            text = default if default is not None else key
        if params:
            try:
                text = text.format(**params)
            except (KeyError, IndexError, ValueError):
                logger.debug(f"Could not format translation {key!r} with {params}")
        return text

    def __contains__(self, key: str) -> bool:
        return key in self.table
