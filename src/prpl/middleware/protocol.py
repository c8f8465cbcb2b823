"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. Middleware wraps the whole PRPL dispatch, so it
sees entrypoint documents and static assets. ``HTTPError`` propagates
through it as an exception and becomes a response at the ASGI handler.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from prpl.http.request import Request
from prpl.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for prpl middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("Server-Timing", f"app;dur={elapsed * 1000:.1f}")

        # Class middleware
        class Vary:
            async def __call__(self, request: Request, next: Next) -> Response:
                return (await next(request)).with_header("Vary", "User-Agent")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
