"""
=============================================================================
FRONT CONTROLLER
=============================================================================

The single entry point every request goes through. Any WSGI server can
host it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      FRONT CONTROLLER FLOW                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   WSGI server                                                        │
    │        │  environ, start_response                                    │
    │        ▼                                                             │
    │   FrontController.__call__                                           │
    │        │  HTTPRequest.from_environ + ResponseStream                  │
    │        ▼                                                             │
    │   MiddlewarePipeline (logging, ...)                                  │
    │        │                                                             │
    │        ▼                                                             │
    │   ContentDispatcher.dispatch                                         │
    │        ├── PathResolver         request-target → file                │
    │        ├── MimeRegistry         extension → Content-Type             │
    │        ├── LocaleResolver       ?lang / cookie / default             │
    │        └── TranslationStore     table for the chosen language        │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestOutcome {status, content_type, is_index}                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The body is pushed through the WSGI ``write`` callable as it is produced,
so the iterable returned to the server is always empty.

=============================================================================
USAGE
=============================================================================

    # WSGI (gunicorn, waitress, wsgiref, ...)
    app = FrontController(AppConfig(root_dir="./site"))

    # Direct, e.g. from tests
    outcome, response = app.serve("/style.css")
    outcome.status          # 200
    response.body           # the file's bytes
=============================================================================
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .config import AppConfig
from .context import AppContext
from .handlers.dispatcher import ContentDispatcher
from .http.request import HTTPRequest
from .http.response import RequestOutcome, ResponseStream, StartResponse
from .http.status_codes import HTTPStatus
from .i18n.locale import LocaleResolver
from .middleware.base import Middleware, MiddlewarePipeline, NextHandler


logger = logging.getLogger(__name__)


class FrontController:
    """
    WSGI application serving one site directory.

    Usage:
        app = FrontController(AppConfig(root_dir="./site"))
        app.use(LoggingMiddleware())
    """

    def __init__(self, config: Optional[AppConfig] = None, context: Optional[AppContext] = None):
        """
        Args:
            config: Site configuration. Validated here; invalid values raise
                    ValueError before any request is served.
            context: Shared application context. Built from ``config`` when
                     omitted.
        """
        if config is None:
            config = context.config if context is not None else AppConfig()
        config.validate()

        self.config = config
        self.context = context or AppContext(config)
        self.locale = LocaleResolver(
            config.translations_path,
            default_language=config.default_language,
            param=config.language_param,
            cookie_name=config.language_cookie,
            cookie_max_age=config.language_cookie_max_age,
        )
        self.dispatcher = ContentDispatcher(self.context, locale=self.locale)

        self._middleware = MiddlewarePipeline()
        self._handler: Optional[NextHandler] = None

    # =========================================================================
    # SETUP
    # =========================================================================

    def use(self, *middleware: Middleware) -> "FrontController":
        """Add middleware. First added = outermost."""
        self._middleware.use(*middleware)
        self._handler = None
        return self

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def setup_logging(self) -> None:
        """Configure logging from the config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("pyfront").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(self, request: HTTPRequest, response: ResponseStream) -> RequestOutcome:
        """
        Run one request through the middleware and the dispatcher.

        Headers are committed by the time this returns, even when nothing
        was written.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self.dispatcher.dispatch)
        outcome = self._handler(request, response)
        response.finish()
        return outcome

    def serve(
        self,
        uri: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Tuple[RequestOutcome, ResponseStream]:
        """Handle ``uri`` without a WSGI server. The body is buffered."""
        request = HTTPRequest.from_uri(uri, method=method, headers=headers, cookies=cookies)
        response = ResponseStream(server_name=self.config.server_name)
        outcome = self.handle(request, response)
        return outcome, response

    def __call__(self, environ: Dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        request = HTTPRequest.from_environ(environ)
        response = ResponseStream(start_response, server_name=self.config.server_name)

        try:
            self.handle(request, response)
        except Exception:
            logger.exception(f"Unhandled error serving {request.method} {request.path}")
            if not response.headers_sent:
                response.set_status(HTTPStatus.INTERNAL_SERVER_ERROR)
                response.remove_header("Content-Type")
                response.finish()
            else:
                # Status already on the wire; the client sees a truncated body
                raise

        return []
