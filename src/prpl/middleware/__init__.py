"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Register with ``PRPL.add_middleware()``; middleware runs in
registration order around the PRPL dispatch.
"""

from prpl.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
