"""
=============================================================================
CONTENT DISPATCHER
=============================================================================

Serves whatever the path resolver found: stream it, or run it.

=============================================================================
STATIC VS DYNAMIC
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ONE ENTRY POINT, TWO KINDS                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   STATIC (style.css, logo.png)      DYNAMIC (index.py, app.py)      │
    │   ──────────────────────────        ──────────────────────────      │
    │                                                                      │
    │   • Content-Type from extension     • Content-Type: text/html       │
    │   • bytes streamed verbatim           (script may override it)      │
    │     in buffer_size chunks           • language resolved first       │
    │                                     • executed in-process, writes   │
    │                                       straight to the response      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FLOW
=============================================================================

    1. Resolve the path (None → 404)
    2. Accessible? exists + regular file + readable (no → 404, no body)
    3. Pick the Content-Type and set it (unless output already started)
    4. Run the script or stream the file
    5. 200, or 500 if streaming/execution failed

Nothing raises out of dispatch(): every failure becomes a status code and a
log line.

=============================================================================
WHAT A SCRIPT SEES
=============================================================================

Each script is compiled and run with ``exec`` in a fresh namespace. Nothing
interpreter-wide (``sys.argv``, ``sys.modules``) is touched. The namespace
holds:

    request      HTTPRequest
    response     ResponseStream (set_header, set_cookie, redirect, write)
    context      AppContext (config, values, plugins, load_time, core_hash)
    vocabulary   TranslationStore with the request's language active
    lang         the selected language code
    echo(*parts) write str() of each part to the body
    t(key, ...)  vocabulary.translate

Example ``public/index.py``:

    response.set_header("Content-Type", "text/plain")
    echo(t("greeting", default="Hello"), ", ", request.get_query("name", "world"))
=============================================================================
"""

import builtins
import logging
from typing import Any, Dict, Optional

from ..context import AppContext
from ..http.request import HTTPRequest
from ..http.response import RequestOutcome, ResponseStream
from ..http.status_codes import HTTPStatus
from ..i18n.locale import LocaleResolver
from .resolver import PathResolver, ResolvedResource


logger = logging.getLogger(__name__)


DYNAMIC_CONTENT_TYPE = "text/html"


class ContentDispatcher:
    """
    Dispatches one request to a static file or a dynamic script.

    Usage:
        dispatcher = ContentDispatcher(context)
        response = ResponseStream()
        outcome = dispatcher.dispatch(HTTPRequest.from_uri("/style.css"), response)
        outcome.status        # 200
        outcome.content_type  # "text/css"
    """

    def __init__(
        self,
        context: AppContext,
        resolver: Optional[PathResolver] = None,
        locale: Optional[LocaleResolver] = None,
    ):
        """
        Args:
            context: Application context (config, MIME table, translations).
            resolver: Path resolver. Built from the config when omitted.
            locale: Language negotiation run before scripts execute.
                    None = scripts run with no active language.
        """
        config = context.config
        self.context = context
        self.resolver = resolver or PathResolver(
            config.public_path,
            index_file=config.index_file,
            dynamic_extension=config.script_extension,
        )
        self.locale = locale
        self.buffer_size = config.buffer_size

    def dispatch(self, request: HTTPRequest, response: ResponseStream) -> RequestOutcome:
        """
        Serve ``request`` into ``response``.

        Returns:
            The status code and negotiated content type.
        """
        # ─────────────────────────────────────────────────────────────────
        # RESOLVE + ACCESSIBILITY
        # ─────────────────────────────────────────────────────────────────
        resource = self.resolver.resolve(request.target)
        if resource is None or not self.resolver.is_accessible(resource.path):
            logger.debug(f"Not found: {request.path}")
            response.set_status(HTTPStatus.NOT_FOUND)
            return RequestOutcome(status=HTTPStatus.NOT_FOUND)

        # ─────────────────────────────────────────────────────────────────
        # CONTENT TYPE
        # ─────────────────────────────────────────────────────────────────
        content_type = self.content_type_for(resource)
        response.set_status(HTTPStatus.OK)
        response.set_content_type(content_type)

        # ─────────────────────────────────────────────────────────────────
        # EXECUTE OR STREAM
        # ─────────────────────────────────────────────────────────────────
        if resource.is_dynamic:
            ok = self._execute(resource, request, response)
        else:
            ok = self._stream(resource, response)

        if not ok:
            response.set_status(HTTPStatus.INTERNAL_SERVER_ERROR)
            return RequestOutcome(
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
                content_type=content_type,
                is_index=resource.is_dynamic,
            )

        return RequestOutcome(
            status=response.status,
            content_type=content_type,
            is_index=resource.is_dynamic,
        )

    def content_type_for(self, resource: ResolvedResource) -> str:
        if resource.is_dynamic:
            return DYNAMIC_CONTENT_TYPE
        return self.context.mime_types.lookup(resource.extension)

    # =========================================================================
    # STATIC
    # =========================================================================

    def _stream(self, resource: ResolvedResource, response: ResponseStream) -> bool:
        try:
            with resource.path.open("rb") as fh:
                for chunk in iter(lambda: fh.read(self.buffer_size), b""):
                    response.write(chunk)
        except OSError as e:
            logger.error(f"Error streaming file {resource.path}: {e}")
            return False
        return True

    # =========================================================================
    # DYNAMIC
    # =========================================================================

    def _execute(self, resource: ResolvedResource, request: HTTPRequest, response: ResponseStream) -> bool:
        vocabulary = self.context.translations
        lang = None
        if self.locale is not None:
            lang = self.locale.resolve(request, response)
            vocabulary.activate(lang)

        namespace = self.script_globals(request, response, lang)
        namespace.update(
            __name__="__pyfront__",
            __file__=str(resource.path),
            __builtins__=builtins,
        )
        try:
            code = compile(resource.path.read_bytes(), str(resource.path), "exec")
            exec(code, namespace)
        except SystemExit:
            # exit() inside a script ends the script, like returning early
            pass
        except Exception:
            logger.exception(f"Script failed: {resource.path}")
            return False
        return True

    def script_globals(
        self,
        request: HTTPRequest,
        response: ResponseStream,
        lang: Optional[str],
    ) -> Dict[str, Any]:
        vocabulary = self.context.translations

        def echo(*parts: Any) -> None:
            for part in parts:
                response.write(part if isinstance(part, (bytes, str)) else str(part))

        return {
            "request": request,
            "response": response,
            "context": self.context,
            "vocabulary": vocabulary,
            "lang": lang,
            "echo": echo,
            "t": vocabulary.translate,
        }
