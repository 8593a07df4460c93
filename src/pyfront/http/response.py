"""
=============================================================================
RESPONSE STREAM & REQUEST OUTCOME
=============================================================================

The front controller does not build a response object and serialize it at
the end. Dynamic scripts write straight into the response as they run, the
same way output goes to a socket. That makes header handling stateful:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HEADERS-SENT GUARD                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   set_status / set_header / set_cookie      ← allowed               │
    │          │                                                           │
    │          ▼                                                           │
    │   first write()  ──►  headers committed (start_response called)     │
    │          │                                                           │
    │          ▼                                                           │
    │   set_status / set_header / set_cookie      ← no-op + warning       │
    │   write()                                   ← appended to body      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Setting a header too late is never an error, only a diagnostic. This is
what lets a script override Content-Type as long as it does so before it
prints anything.

``RequestOutcome`` is the value ``dispatch()`` returns: the status code and
the content type that was negotiated. It is the only result callers need;
everything else went to the stream.
=============================================================================
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from http.cookies import SimpleCookie
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


# start_response(status, headers) -> write callable (PEP 3333)
StartResponse = Callable[[str, List[Tuple[str, str]]], Optional[Callable[[bytes], Any]]]


@dataclass(frozen=True)
class RequestOutcome:
    """
    Result of dispatching one request.

    Attributes:
        status: HTTP status code (200, 404, 500, or whatever a script set).
        content_type: Negotiated Content-Type, None when nothing was found.
        is_index: True when a dynamic resource was executed.
    """

    status: int
    content_type: Optional[str] = None
    is_index: bool = False

    @property
    def found(self) -> bool:
        return self.status != HTTPStatus.NOT_FOUND


class ResponseStream:
    """
    Output stream for one response.

    Without ``start_response`` the body is buffered in memory (tests, tools).
    With it, headers are committed on the first write and body bytes go to
    the WSGI ``write`` callable as they are produced.

    Usage:
        response = ResponseStream()
        response.set_header("Content-Type", "text/plain")
        response.write("hello")
        response.set_header("X-Late", "1")   # ignored, logged
        response.body                          # b"hello"
    """

    def __init__(
        self,
        start_response: Optional[StartResponse] = None,
        server_name: Optional[str] = None,
    ):
        self.status: int = HTTPStatus.OK
        self.headers: Dict[str, str] = {}
        self.cookies: SimpleCookie = SimpleCookie()
        self.headers_sent = False
        self.bytes_written = 0

        self._start_response = start_response
        self._server_name = server_name
        self._sink: Optional[Callable[[bytes], Any]] = None
        self._chunks: List[bytes] = []

    # =========================================================================
    # STATUS & HEADERS (only before output starts)
    # =========================================================================

    def _guard(self, what: str) -> bool:
        if self.headers_sent:
            logger.warning(f"Headers already sent, cannot set {what}")
            return False
        return True

    def set_status(self, status: int) -> bool:
        """Set the status code. Returns False if headers were already sent."""
        if not self._guard(f"status {int(status)}"):
            return False
        self.status = status
        return True

    def set_header(self, name: str, value: str) -> bool:
        """
        Set (replace) a header, case-insensitively.

        Returns:
            False if output has already started and the header was skipped.
        """
        if not self._guard(f"header {name}"):
            return False
        self._drop_header(name)
        self.headers[name] = value
        return True

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def remove_header(self, name: str) -> bool:
        if not self._guard(f"header {name}"):
            return False
        self._drop_header(name)
        return True

    def _drop_header(self, name: str) -> None:
        lowered = name.lower()
        for key in [k for k in self.headers if k.lower() == lowered]:
            del self.headers[key]

    def set_content_type(self, content_type: str) -> bool:
        return self.set_header("Content-Type", content_type)

    def set_cookie(
        self,
        name: str,
        value: str,
        max_age: Optional[int] = None,
        path: str = "/",
        http_only: bool = False,
        same_site: Optional[str] = "Lax",
    ) -> bool:
        """
        Queue a Set-Cookie header.

        Args:
            max_age: Lifetime in seconds; also emitted as ``expires`` for
                     clients that ignore Max-Age.
        """
        if not self._guard(f"cookie {name}"):
            return False
        self.cookies[name] = value
        morsel = self.cookies[name]
        morsel["path"] = path
        if max_age is not None:
            morsel["max-age"] = str(max_age)
            expires = datetime.now(timezone.utc).timestamp() + max_age
            morsel["expires"] = format_http_date(datetime.fromtimestamp(expires, tz=timezone.utc))
        if http_only:
            morsel["httponly"] = True
        if same_site:
            morsel["samesite"] = same_site
        return True

    def redirect(self, location: str, permanent: bool = False) -> bool:
        """
        Redirect the client (302, or 301 when ``permanent``).

        Like every header write, this is a no-op once output has started.
        """
        if not self._guard(f"redirect to {location}"):
            return False
        self.status = HTTPStatus.MOVED_PERMANENTLY if permanent else HTTPStatus.FOUND
        self._drop_header("Location")
        self.headers["Location"] = location
        return True

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def header_list(self) -> List[Tuple[str, str]]:
        """Headers as WSGI (name, value) pairs, Set-Cookie lines included."""
        items = list(self.headers.items())
        if self._server_name and self.get_header("Server") is None:
            items.append(("Server", self._server_name))
        for morsel in self.cookies.values():
            items.append(("Set-Cookie", morsel.OutputString()))
        return items

    @property
    def status_line(self) -> str:
        try:
            return HTTPStatus(self.status).status_line
        except ValueError:
            return f"{int(self.status)} Unknown"

    def send_headers(self) -> None:
        """Commit status and headers. Idempotent."""
        if self.headers_sent:
            return
        self.headers_sent = True
        if self._start_response is not None:
            self._sink = self._start_response(self.status_line, self.header_list())

    def write(self, data: Union[str, bytes]) -> int:
        """
        Append to the body, committing headers first if needed.

        Returns:
            Number of bytes written.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data:
            return 0

        self.send_headers()
        if self._sink is not None:
            self._sink(data)
        else:
            self._chunks.append(data)
        self.bytes_written += len(data)
        return len(data)

    def finish(self) -> None:
        """End the response; commits headers when nothing was written."""
        self.send_headers()

    @property
    def body(self) -> bytes:
        """Buffered body (empty when streaming to a WSGI write callable)."""
        return b"".join(self._chunks)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are always GMT; ``dt`` should be UTC.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
