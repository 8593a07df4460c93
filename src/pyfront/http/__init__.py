"""
=============================================================================
HTTP MODULE
=============================================================================

Protocol-level values used by the front controller:

    request.py       HTTPRequest built from a URI or a WSGI environ
    response.py      ResponseStream (headers-sent guard) and RequestOutcome
    status_codes.py  HTTPStatus enum with reason phrases
    mime_types.py    MimeRegistry (extension → Content-Type)

No socket handling lives here; an external WSGI listener owns the wire.
=============================================================================
"""

from .request import HTTPRequest, parse_cookie_header, split_target
from .response import ResponseStream, RequestOutcome, format_http_date
from .status_codes import HTTPStatus
from .mime_types import MimeRegistry, DEFAULT_MIME_TYPE, MIME_TABLE_VERSION

__all__ = [
    # Request
    "HTTPRequest",
    "parse_cookie_header",
    "split_target",

    # Response
    "ResponseStream",
    "RequestOutcome",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # MIME types
    "MimeRegistry",
    "DEFAULT_MIME_TYPE",
    "MIME_TABLE_VERSION",
]
