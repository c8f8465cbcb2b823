"""ASGI handler — translates ASGI scope/messages to prpl types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and the mux,
and sends the Response back through ASGI send().
"""

from prpl._internal.asgi import Receive, Scope, Send
from prpl._internal.invoke import invoke
from prpl.errors import HTTPError
from prpl.http.request import Request
from prpl.http.response import Response
from prpl.middleware.protocol import Middleware, Next
from prpl.routing.mux import ServeMux
from prpl.server.errors import handle_http_error, handle_internal_error
from prpl.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    mux: ServeMux,
    middleware: tuple[Middleware, ...] = (),
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def dispatch(req: Request) -> Response:
        target = mux.canonical(req.path)
        if target != req.path:
            if req.query_string:
                target = f"{target}?{req.query_string.decode('latin-1')}"
            return Response(body="", status=301).with_header("Location", target)
        route = mux.match(req.path)
        return await invoke(route.handler, req)

    # Wrap middleware around the dispatch
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send, head=request.method == "HEAD")
