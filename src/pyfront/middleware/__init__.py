"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting concerns wrapped around dispatch:

    request ──► LoggingMiddleware ──► ... ──► ContentDispatcher.dispatch
    outcome ◄── (access log line)    ◄── ... ◄──

    base.py      Middleware ABC, MiddlewarePipeline, FunctionMiddleware
    logging.py   LoggingMiddleware (pyfront.access logger, X-Request-ID)
=============================================================================
"""

from .base import (
    Middleware,
    MiddlewarePipeline,
    NextHandler,
    FunctionMiddleware,
    function_middleware,
)
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "FunctionMiddleware",
    "function_middleware",
    "LoggingMiddleware",
    "RequestLog",
]
