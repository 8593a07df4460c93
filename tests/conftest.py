"""
pytest configuration and fixtures.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pyfront import AppConfig, AppContext, FrontController


STYLE_CSS = b"body { color: #333; }\n/* \xc3\xa9 */\n"

INDEX_SCRIPT = """\
echo(t("greeting", default="Hello"), ", ", request.get_query("name", "world"), "!")
"""

DOCS_INDEX_SCRIPT = """\
echo("docs:", lang)
"""

BROKEN_SCRIPT = """\
echo("partial")
raise RuntimeError("boom")
"""

EXIT_SCRIPT = """\
echo("before")
raise SystemExit
"""

REDIRECT_SCRIPT = """\
response.redirect("/docs/")
"""

CONTEXT_SCRIPT = """\
context.set_value("seen", request.path)
widget = context.plugins.load("acme.widget")
echo(widget.render(lang))
"""

WIDGET_PLUGIN = """\
def render(lang):
    return f"widget[{lang}]"
"""


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    A small site tree:

        site/
        ├── public/
        │   ├── index.py, style.css, notes (no extension), data.bin
        │   ├── broken.py, stop.py, moved.py, widget.py
        │   ├── docs/index.py
        │   └── empty/            (no index)
        └── private/
            ├── vocabulary/en.json, fr.lang, xx.spl
            └── plugins/acme/widget.py
    """
    root = tmp_path / "site"
    public = root / "public"
    vocabulary = root / "private" / "vocabulary"
    plugins = root / "private" / "plugins" / "acme"
    for directory in (public / "docs", public / "empty", vocabulary, plugins):
        directory.mkdir(parents=True)

    (public / "index.py").write_text(INDEX_SCRIPT)
    (public / "style.css").write_bytes(STYLE_CSS)
    (public / "data.bin").write_bytes(bytes(range(256)) * 600)
    (public / "notes").write_text("no extension")
    (public / "broken.py").write_text(BROKEN_SCRIPT)
    (public / "stop.py").write_text(EXIT_SCRIPT)
    (public / "moved.py").write_text(REDIRECT_SCRIPT)
    (public / "widget.py").write_text(CONTEXT_SCRIPT)
    (public / "docs" / "index.py").write_text(DOCS_INDEX_SCRIPT)

    (vocabulary / "en.json").write_text(json.dumps({
        "greeting": "Hello",
        "nav": {"home": "Home", "about": "About"},
        "welcome": "Welcome, {name}",
    }))
    (vocabulary / "fr.lang").write_text(
        "# French\n"
        "greeting = Bonjour\n"
        "nav.home=Accueil\n"
        "equation = a=b\n"
    )
    (vocabulary / "xx.spl").write_text("reserved")

    (plugins / "widget.py").write_text(WIDGET_PLUGIN)
    return root


@pytest.fixture
def config(site: Path) -> AppConfig:
    """Configuration rooted at the site fixture."""
    return AppConfig(root_dir=str(site), log_level="WARNING")


@pytest.fixture
def context(config: AppConfig) -> AppContext:
    return AppContext(config)


@pytest.fixture
def app(config: AppConfig) -> FrontController:
    return FrontController(config)


class StartResponseRecorder:
    """Stands in for the WSGI server's start_response."""

    def __init__(self):
        self.calls: List[Tuple[str, List[Tuple[str, str]]]] = []
        self.written: List[bytes] = []

    def __call__(self, status: str, headers: List[Tuple[str, str]], exc_info=None):
        self.calls.append((status, headers))
        return self.written.append

    @property
    def status(self) -> str:
        return self.calls[-1][0]

    @property
    def headers(self) -> List[Tuple[str, str]]:
        return self.calls[-1][1]

    def header(self, name: str) -> Any:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    @property
    def body(self) -> bytes:
        return b"".join(self.written)


@pytest.fixture
def start_response() -> StartResponseRecorder:
    return StartResponseRecorder()


def make_environ(path: str = "/", query: str = "", **extra: Any) -> Dict[str, Any]:
    """Minimal WSGI environ for ``path``."""
    environ = {
        "REQUEST_METHOD": "GET",
        "SCRIPT_NAME": "",
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "SERVER_PROTOCOL": "HTTP/1.1",
        "REMOTE_ADDR": "127.0.0.1",
        "wsgi.url_scheme": "http",
    }
    environ.update(extra)
    return environ
