"""Error handling pipeline for prpl requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. A failed request never takes the server down with it.
"""

import logging
import traceback

from prpl.errors import HTTPError
from prpl.http.request import Request
from prpl.http.response import Response

logger = logging.getLogger("prpl.server")

TEXT_PLAIN = "text/plain; charset=utf-8"


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    response = Response(body=detail, status=exc.status, content_type=TEXT_PLAIN)
    return response.with_headers(exc.headers)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    body = "Internal Server Error"
    if debug:
        body = "".join(traceback.format_exception(exc))
    return Response(body=body, status=500, content_type=TEXT_PLAIN)
