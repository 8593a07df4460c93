"""
=============================================================================
APPLICATION CONFIGURATION
=============================================================================

Centralized configuration for the front controller.

=============================================================================
DIRECTORY LAYOUT
=============================================================================

Everything hangs off one root directory. Each sub-path can be overridden,
but the defaults describe a conventional site:

    <root>/
    ├── public/                 ← public_root: everything servable
    │   ├── index.py            ← index_file, executed for "/"
    │   ├── style.css
    │   └── docs/index.py
    └── private/                ← never served
        ├── vocabulary/         ← translations_dir: en.json, fr.lang, ...
        └── plugins/            ← plugins_dir: acme/widgets.py

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    1. Command-line arguments     python -m pyfront --root ./site
    2. Environment variables      PYFRONT_ROOT=./site python -m pyfront
    3. Defaults (this dataclass)

Validate eagerly at startup (``validate()``), not lazily at first request.
=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


TEN_YEARS = 10 * 365 * 24 * 60 * 60


@dataclass
class AppConfig:
    """
    Configuration for the front controller.

    Development:
        AppConfig(root_dir="./site", log_level="DEBUG")

    Production:
        AppConfig.from_env()   # PYFRONT_* variables
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILESYSTEM
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Document root. The other directories default to paths under it."""

    public_dir: Optional[str] = None
    """Sandbox for served resources. Default: <root>/public."""

    translations_dir: Optional[str] = None
    """One translation file per language code. Default: <root>/private/vocabulary."""

    plugins_dir: Optional[str] = None
    """Plugin modules. Default: <root>/private/plugins."""

    mime_types_file: Optional[str] = None
    """
    JSON file with an {extension: type} object.
    None = built-in table. A missing file degrades to the default type only.
    """

    # ─────────────────────────────────────────────────────────────────────
    # DISPATCH
    # ─────────────────────────────────────────────────────────────────────

    index_file: str = "index.py"
    """Filename substituted for directory and extension-less requests."""

    dynamic_extension: Optional[str] = None
    """
    Extension of executable resources, without the dot.
    None = the index file's extension ("py").
    """

    buffer_size: int = 64 * 1024
    """Chunk size used when streaming static files (64 KB)."""

    # ─────────────────────────────────────────────────────────────────────
    # LANGUAGE
    # ─────────────────────────────────────────────────────────────────────

    default_language: str = "en"

    language_param: str = "lang"
    """Query parameter that overrides the language (?lang=fr)."""

    language_cookie: str = "lang"
    """Cookie holding the persisted language preference."""

    language_cookie_max_age: int = TEN_YEARS

    # ─────────────────────────────────────────────────────────────────────
    # LISTENER (used by the CLI only)
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 8080

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    server_name: str = "PyFront/1.0"
    """Value of the Server response header. Empty string = omit."""

    # =========================================================================
    # DERIVED PATHS
    # =========================================================================

    @property
    def root_path(self) -> Path:
        return Path(self.root_dir).resolve()

    @property
    def public_path(self) -> Path:
        if self.public_dir:
            return Path(self.public_dir).resolve()
        return self.root_path / "public"

    @property
    def private_path(self) -> Path:
        return self.root_path / "private"

    @property
    def translations_path(self) -> Path:
        if self.translations_dir:
            return Path(self.translations_dir).resolve()
        return self.private_path / "vocabulary"

    @property
    def plugins_path(self) -> Path:
        if self.plugins_dir:
            return Path(self.plugins_dir).resolve()
        return self.private_path / "plugins"

    @property
    def script_extension(self) -> str:
        """The dynamic extension in effect, lowercase, without a dot."""
        ext = self.dynamic_extension or Path(self.index_file).suffix
        return ext.lstrip(".").lower()

    # =========================================================================
    # LOADING & VALIDATION
    # =========================================================================

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Create configuration from environment variables.

        PYFRONT_ROOT              Document root (default: .)
        PYFRONT_PUBLIC_DIR        Public root override
        PYFRONT_TRANSLATIONS_DIR  Translations directory override
        PYFRONT_PLUGINS_DIR       Plugins directory override
        PYFRONT_MIME_TYPES        MIME table JSON file
        PYFRONT_INDEX_FILE        Index filename (default: index.py)
        PYFRONT_DEFAULT_LANG      Default language (default: en)
        PYFRONT_HOST / PYFRONT_PORT
        PYFRONT_LOG_LEVEL         Logging level (default: INFO)
        PYFRONT_LOG_FORMAT        text or json (default: text)
        """
        return cls(
            root_dir=os.getenv("PYFRONT_ROOT", "."),
            public_dir=os.getenv("PYFRONT_PUBLIC_DIR"),
            translations_dir=os.getenv("PYFRONT_TRANSLATIONS_DIR"),
            plugins_dir=os.getenv("PYFRONT_PLUGINS_DIR"),
            mime_types_file=os.getenv("PYFRONT_MIME_TYPES"),
            index_file=os.getenv("PYFRONT_INDEX_FILE", "index.py"),
            default_language=os.getenv("PYFRONT_DEFAULT_LANG", "en"),
            host=os.getenv("PYFRONT_HOST", "127.0.0.1"),
            port=int(os.getenv("PYFRONT_PORT", "8080")),
            log_level=os.getenv("PYFRONT_LOG_LEVEL", "INFO"),
            log_format=os.getenv("PYFRONT_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not self.index_file or "/" in self.index_file or "\\" in self.index_file:
            raise ValueError(f"index_file must be a plain filename, got {self.index_file!r}")

        if not self.script_extension:
            raise ValueError("dynamic_extension is empty and index_file has no extension")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if not self.default_language:
            raise ValueError("default_language must not be empty")

        if self.language_cookie_max_age <= 0:
            raise ValueError("language_cookie_max_age must be > 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")
