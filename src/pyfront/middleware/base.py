"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Middleware wraps the front controller's dispatch step. Each layer receives
the request, the response stream and the next handler in the chain:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           REQUEST FLOW                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ┌──────────┐    ┌──────────┐    ┌──────────────────────┐          │
    │   │  Logging │───►│  Custom  │───►│  ContentDispatcher   │          │
    │   │    MW    │    │    MW    │    │     .dispatch()      │          │
    │   └────┬─────┘    └────┬─────┘    └──────────┬───────────┘          │
    │        │               │                     │                      │
    │   [before]        [before]              [stream/execute]            │
    │   request id      e.g. headers                                      │
    │        ▲               ▲                     │                      │
    │   [after]         [after]                    ▼                      │
    │   access log      inspect outcome      RequestOutcome               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAMING CAVEAT
=============================================================================

The body is written to the client while the handler runs. Headers are
committed with the first byte, so a middleware that wants to add a header
must do it BEFORE calling next(). After next() returns the outcome can be
inspected, but the response can no longer be changed.

A middleware can short-circuit by writing its own response and returning a
RequestOutcome without calling next().
=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import RequestOutcome, ResponseStream


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIAS
# =============================================================================

# The next middleware or the final dispatch step.
NextHandler = Callable[[HTTPRequest, ResponseStream], RequestOutcome]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class PoweredBy(Middleware):
            def __call__(self, request, response, next):
                response.set_header("X-Powered-By", "pyfront")   # before
                outcome = next(request, response)
                return outcome                                   # after
    """

    @abstractmethod
    def __call__(
        self,
        request: HTTPRequest,
        response: ResponseStream,
        next: NextHandler,
    ) -> RequestOutcome:
        """
        Process the request.

        Args:
            request: The incoming request
            response: The response stream for this request
            next: The next handler in the chain

        Returns:
            The outcome from next(), or a short-circuited one
        """
        pass

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added = outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        pipeline.add(PoweredBy())

        handler = pipeline.wrap(dispatcher.dispatch)
        outcome = handler(request, response)   # Logging → PoweredBy → dispatch
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append one middleware. Returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Append several middleware at once."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap ``handler`` with every middleware in the pipeline.

        Wrapped in reverse so that the first-added middleware ends up
        outermost: [A, B, C] → A(B(C(handler))).
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(self, middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest, response: ResponseStream) -> RequestOutcome:
            return middleware(request, response, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)


# =============================================================================
# FUNCTION MIDDLEWARE
# =============================================================================

class FunctionMiddleware(Middleware):
    """
    Wraps a plain function as middleware.

        def no_cache(request, response, next):
            response.set_header("Cache-Control", "no-store")
            return next(request, response)

        pipeline.add(FunctionMiddleware(no_cache))
    """

    def __init__(
        self,
        func: Callable[[HTTPRequest, ResponseStream, NextHandler], RequestOutcome],
        name: Optional[str] = None,
    ):
        self._func = func
        self._name = name or func.__name__

    def __call__(self, request: HTTPRequest, response: ResponseStream, next: NextHandler) -> RequestOutcome:
        return self._func(request, response, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(
    func: Callable[[HTTPRequest, ResponseStream, NextHandler], RequestOutcome]
) -> FunctionMiddleware:
    """Decorator form of FunctionMiddleware."""
    return FunctionMiddleware(func)
