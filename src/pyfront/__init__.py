"""
=============================================================================
PYFRONT - A Front Controller for Static Files and Python Scripts
=============================================================================

Every request enters through one WSGI callable, is mapped to a file under
the public root, and is either streamed (static) or executed (script).
Scripts get the request's language already negotiated and its translation
table loaded.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    pyfront/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m pyfront)
    ├── app.py               # FrontController (WSGI application)
    ├── config.py            # AppConfig dataclass
    ├── context.py           # AppContext: shared tables, values, versions
    ├── plugins.py           # PluginLoader
    ├── http/                # Request/response primitives
    │   ├── request.py       # HTTPRequest (from a URI or a WSGI environ)
    │   ├── response.py      # ResponseStream, RequestOutcome
    │   ├── status_codes.py  # HTTP status enums
    │   └── mime_types.py    # MimeRegistry
    ├── handlers/            # Resolution and dispatch
    │   ├── resolver.py      # PathResolver
    │   └── dispatcher.py    # ContentDispatcher
    ├── i18n/                # Languages
    │   ├── locale.py        # LocaleResolver
    │   └── store.py         # TranslationStore
    └── middleware/
        ├── base.py          # Middleware, MiddlewarePipeline
        └── logging.py       # LoggingMiddleware

=============================================================================
QUICK START
=============================================================================

    from pyfront import FrontController, AppConfig
    from pyfront.middleware import LoggingMiddleware

    app = FrontController(AppConfig(root_dir="./site"))
    app.use(LoggingMiddleware())

    # hand `app` to any WSGI server, or:
    #   python -m pyfront --root ./site
=============================================================================
"""

__version__ = "1.0.0"

from .app import FrontController
from .config import AppConfig
from .context import AppContext

__all__ = ["FrontController", "AppConfig", "AppContext", "__version__"]
