"""
Application context.

One object carries what every component needs: the configuration, the
process start time, a key/value bag for application data, and the shared
tables (MIME registry, translations, plugin loader) built lazily on first
access. It is passed explicitly; no component keeps configuration in
module-level globals.
"""

import hashlib
import logging
import threading
import time
from typing import Any, Dict, Optional

from .config import AppConfig
from .http.mime_types import MimeRegistry
from .i18n.store import TranslationStore
from .plugins import PluginLoader


logger = logging.getLogger(__name__)


# Component name → version. Feeds the version string and core hash shown
# by diagnostic pages; nothing else depends on it.
COMPONENTS: Dict[str, str] = {
    "pyfront": "1.0.0",
    "config": "1.0.0",
    "http": "1.0.0",
    "handlers": "1.0.0",
    "i18n": "1.0.0",
    "middleware": "1.0.0",
    "plugins": "1.0.0",
}


class AppContext:
    """
    Shared, explicitly passed application state.

    Usage:
        context = AppContext(AppConfig(root_dir="./site"))
        context.mime_types.lookup("css")
        context.set_value("title", "Home")
        context.load_time()              # seconds since startup
    """

    def __init__(self, config: Optional[AppConfig] = None, start_time: Optional[float] = None):
        self.config = config or AppConfig()
        self.start_time = start_time if start_time is not None else time.perf_counter()
        self.started_at = time.time()

        self._values: Dict[str, Any] = {}
        self._components: Dict[str, str] = dict(COMPONENTS)

        self._lock = threading.Lock()
        self._mime_types: Optional[MimeRegistry] = None
        self._translations: Optional[TranslationStore] = None
        self._plugins: Optional[PluginLoader] = None

    # =========================================================================
    # SHARED TABLES (built once, on first access)
    # =========================================================================

    @property
    def mime_types(self) -> MimeRegistry:
        if self._mime_types is None:
            with self._lock:
                if self._mime_types is None:
                    self._mime_types = MimeRegistry(source=self.config.mime_types_file)
        return self._mime_types

    @property
    def translations(self) -> TranslationStore:
        if self._translations is None:
            with self._lock:
                if self._translations is None:
                    self._translations = TranslationStore(self.config.translations_path)
        return self._translations

    @property
    def plugins(self) -> PluginLoader:
        if self._plugins is None:
            with self._lock:
                if self._plugins is None:
                    self._plugins = PluginLoader(self.config.plugins_path)
        return self._plugins

    # =========================================================================
    # VALUES
    # =========================================================================

    def set_value(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get_value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def has_value(self, key: str) -> bool:
        return key in self._values

    # =========================================================================
    # TIMING & VERSIONS
    # =========================================================================

    def load_time(self) -> float:
        """Seconds since the context started, rounded to 4 places."""
        return round(time.perf_counter() - self.start_time, 4)

    def register_component(self, name: str, version: str) -> None:
        self._components[name] = version
        logger.debug(f"Registered component {name} {version}")

    @property
    def components(self) -> Dict[str, str]:
        return dict(self._components)

    @property
    def version(self) -> str:
        return self._components["pyfront"]

    def core_hash(self, length: int = 8) -> str:
        """
        Short SHA-256 fingerprint of the registered component versions.

        Changes whenever any component version changes.
        """
        joined = "".join(f"{name}={version};" for name, version in sorted(self._components.items()))
        return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:length]
