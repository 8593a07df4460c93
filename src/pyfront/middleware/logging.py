"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per request, with timing and a correlation ID.

    TEXT (Apache-style, default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /style.css" 200 ... │
    │ IP          Timestamp             Method/Path   Status Size Duration│
    └─────────────────────────────────────────────────────────────────────┘

    JSON:
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "GET", "path": "/",            │
    │  "status_code": 200, "content_type": "text/html", "is_index": true, │
    │  "content_length": 512, "duration_ms": 3.1, ...}                    │
    └─────────────────────────────────────────────────────────────────────┘

Lines go to the ``pyfront.access`` logger, so they can be routed separately:

    logging.getLogger("pyfront.access").addHandler(file_handler)

The X-Request-ID header is set before the request is dispatched: once the
body starts streaming, headers are already on the wire.
=============================================================================
"""

import time
import json
import uuid
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import RequestOutcome, ResponseStream


logger = logging.getLogger("pyfront.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_type: Optional[str]
    is_index: bool
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it first so it sees every request.

        pipeline.add(LoggingMiddleware(log_format="json", skip_paths=["/favicon.ico"]))
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[List[str]] = None,
    ):
        """
        Args:
            log_format: "text" (Apache-style) or "json"
            include_request_id: Send an X-Request-ID response header
            log_level: Level the access lines are logged at
            skip_paths: Request paths that are not logged
        """
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, response: ResponseStream, next: NextHandler) -> RequestOutcome:
        request_id = str(uuid.uuid4())[:8]
        if self.include_request_id:
            response.set_header("X-Request-ID", request_id)

        start_time = time.time()
        try:
            outcome = next(request, response)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise
        duration_ms = (time.time() - start_time) * 1000

        if request.path in self.skip_paths:
            return outcome

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.query_string,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(outcome.status),
            content_type=outcome.content_type,
            is_index=outcome.is_index,
            content_length=response.bytes_written,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return outcome
