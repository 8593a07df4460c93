"""
=============================================================================
HTTP REQUEST
=============================================================================

The request value handed to the front controller by the external listener.

The controller is method-agnostic: the only things it reads are the
request-target (path + query string), the cookies and a few headers. There
is no byte-level parsing here; the listener already did that. Two
constructors cover the two ways a request arrives:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   WSGI server ── environ ──► HTTPRequest.from_environ(environ)      │
    │                                                                      │
    │   tests / tools ── "/a/b?lang=fr" ──► HTTPRequest.from_uri(uri)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TARGET VS PATH
=============================================================================

    target:  "/docs/a%20b.txt?lang=fr"   ← as sent, still percent-encoded
    path:    "/docs/a b.txt"             ← decoded, no query string

The path resolver works from ``target`` so that decoding happens exactly
once, in one place.
=============================================================================
"""

import logging
from dataclasses import dataclass, field
from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qs, quote, unquote, urlsplit


logger = logging.getLogger(__name__)


def split_target(target: str) -> Tuple[str, str]:
    """
    Split a request-target into (path, query), dropping any fragment.

    Unlike urlsplit, a leading "//" stays part of the path instead of
    being read as a network location.

        >>> split_target("//a/b?x=1#top")
        ('//a/b', 'x=1')
    """
    target = target.split("#", 1)[0]
    path, _, query = target.partition("?")
    return path or "/", query


def parse_cookie_header(header: str) -> Dict[str, str]:
    """
    Parse a ``Cookie`` request header into a name → value dict.

    Malformed headers yield whatever could be parsed before the error
    (possibly nothing); they never raise.
    """
    if not header:
        return {}
    jar = SimpleCookie()
    try:
        jar.load(header)
    except CookieError as e:
        logger.debug(f"Ignoring malformed Cookie header: {e}")
    return {name: morsel.value for name, morsel in jar.items()}


@dataclass
class HTTPRequest:
    """
    A request as seen by the front controller.

    Attributes:
        method:         HTTP method. Carried for logging only.
        target:         Raw request-target (percent-encoded path + query).
        path:           Decoded path without the query string.
        query_params:   "?a=1&a=2&b=3" → {"a": ["1", "2"], "b": ["3"]}
        headers:        Header names lowercased.
        cookies:        Cookie name → value.
        client_address: (ip, port) of the client, when known.
        scheme:         "http" or "https".
        script_name:    Mount prefix (WSGI SCRIPT_NAME); not part of path.
        environ:        The WSGI environ, when the request came from one.
    """

    method: str
    target: str
    path: str = "/"
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)
    scheme: str = "http"
    script_name: str = ""
    environ: Optional[Dict[str, Any]] = field(default=None, repr=False)

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_uri(
        cls,
        uri: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> "HTTPRequest":
        """
        Build a request from a request-target such as ``/index?lang=fr``.

        Args:
            uri: Path plus optional query string (and fragment, ignored).
            method: HTTP method.
            headers: Optional headers (any case).
            cookies: Optional cookies. When omitted, a ``Cookie`` entry in
                     ``headers`` is parsed instead.
        """
        path, query = split_target(uri or "/")
        lowered = {name.lower(): value for name, value in (headers or {}).items()}

        if cookies is None:
            cookie_jar = parse_cookie_header(lowered.get("cookie", ""))
        else:
            cookie_jar = dict(cookies)

        return cls(
            method=method.upper(),
            target=uri or "/",
            path=unquote(path) or "/",
            query_params=parse_qs(query, keep_blank_values=True),
            headers=lowered,
            cookies=cookie_jar,
        )

    @classmethod
    def from_environ(cls, environ: Dict[str, Any]) -> "HTTPRequest":
        """
        Build a request from a WSGI environ (PEP 3333).

        Only PATH_INFO is the path inside the application; SCRIPT_NAME is
        the mount prefix and is kept apart in ``script_name``.

        PATH_INFO arrives already percent-decoded as a latin-1 "bytes as
        str" value, so it is re-encoded to recover the original target.
        """
        raw_path = environ.get("PATH_INFO", "")
        raw_path = raw_path.encode("latin-1").decode("utf-8", "replace") or "/"
        query = environ.get("QUERY_STRING", "")

        target = quote(raw_path, safe="/;=,~!$&'()*+:@")
        if query:
            target = f"{target}?{query}"

        # ─────────────────────────────────────────────────────────────────
        # HEADERS: HTTP_ACCEPT_LANGUAGE → accept-language
        # ─────────────────────────────────────────────────────────────────
        headers: Dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = value
        if environ.get("CONTENT_TYPE"):
            headers["content-type"] = environ["CONTENT_TYPE"]
        if environ.get("CONTENT_LENGTH"):
            headers["content-length"] = environ["CONTENT_LENGTH"]

        try:
            port = int(environ.get("REMOTE_PORT", 0))
        except (TypeError, ValueError):
            port = 0

        return cls(
            method=environ.get("REQUEST_METHOD", "GET").upper(),
            target=target,
            path=raw_path,
            query_params=parse_qs(query, keep_blank_values=True),
            headers=headers,
            cookies=parse_cookie_header(headers.get("cookie", "")),
            client_address=(environ.get("REMOTE_ADDR", ""), port),
            scheme=environ.get("wsgi.url_scheme", "http"),
            script_name=environ.get("SCRIPT_NAME", "").encode("latin-1").decode("utf-8", "replace"),
            environ=environ,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def query_string(self) -> str:
        return split_target(self.target)[1]

    @property
    def host(self) -> str:
        """Host header value, falling back to SERVER_NAME from the environ."""
        host = self.headers.get("host", "")
        if not host and self.environ:
            host = self.environ.get("SERVER_NAME", "")
        return host

    @property
    def domain(self) -> str:
        """Host name without the port, ``localhost`` when unknown."""
        host = self.host
        if not host:
            return "localhost"
        return urlsplit(f"{self.scheme}://{host}").hostname or "localhost"

    @property
    def root_link(self) -> str:
        """Scheme plus domain, e.g. ``https://example.com``."""
        return f"{self.scheme}://{self.domain}"

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        First value of a query parameter.

            # URL: /page?lang=fr&lang=de
            request.get_query("lang")  # "fr"
        """
        values = self.query_params.get(name, [])
        return values[0] if values else default

    def get_query_list(self, name: str) -> list[str]:
        return self.query_params.get(name, [])

    def get_cookie(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.cookies.get(name, default)
