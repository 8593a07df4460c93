"""
Plugin loader.

Plugins are plain Python modules kept outside the public root, addressed by a
dotted identifier relative to the plugins directory:

    "blog.feed"  →  <root>/private/plugins/blog/feed.py

Scripts reach the loader through ``context.plugins``:

    feed = context.plugins.load("blog.feed")
    if feed is not None:
        echo(feed.render(lang))

Identifiers are never allowed to leave the plugins directory: anything with
``..``, a ``/`` or a leading ``\\`` is refused.
"""

import importlib.util
import logging
import threading
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Optional, Union


logger = logging.getLogger(__name__)


MODULE_PREFIX = "pyfront_plugins"


class PluginLoader:
    """Loads and caches plugin modules by dotted identifier."""

    def __init__(self, plugins_dir: Union[str, Path]):
        self.plugins_dir = Path(plugins_dir)
        self._modules: Dict[str, ModuleType] = {}
        self._lock = threading.Lock()

    @staticmethod
    def is_valid_identifier(identifier: str) -> bool:
        if not identifier or ".." in identifier or "/" in identifier:
            return False
        if identifier.startswith("\\"):
            return False
        return all(part.isidentifier() for part in identifier.split("."))

    def path_for(self, identifier: str) -> Path:
        """Map ``"pkg.module"`` to ``<plugins_dir>/pkg/module.py``."""
        return self.plugins_dir.joinpath(*identifier.split(".")).with_suffix(".py")

    def load(self, identifier: str) -> Optional[ModuleType]:
        """
        Import the plugin named ``identifier``.

        Returns:
            The module, or None when the identifier is refused, the file is
            missing, or the module fails to import.
        """
        if not self.is_valid_identifier(identifier):
            logger.warning(f"Refusing plugin identifier: {identifier!r}")
            return None

        with self._lock:
            if identifier in self._modules:
                return self._modules[identifier]

            path = self.path_for(identifier)
            if not path.is_file():
                logger.error(f"Plugin not found: {identifier} ({path})")
                return None

            module_name = f"{MODULE_PREFIX}.{identifier}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                logger.error(f"Cannot load plugin {identifier} from {path}")
                return None

            module = importlib.util.module_from_spec(spec)
            try:
                spec.loader.exec_module(module)
            except Exception:
                logger.exception(f"Plugin failed to import: {identifier}")
                return None

            self._modules[identifier] = module
            logger.debug(f"Loaded plugin {identifier} from {path}")
            return module

    def loaded(self) -> List[str]:
        return sorted(self._modules)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._modules
