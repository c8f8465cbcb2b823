"""Serve in-memory content with conditional and byte-range support.

Used for both the startup-cached entrypoint documents and files read
from disk by ``StaticFiles``::

    response = serve_content(request, "app/index.html", data, modified)

Handles ``If-Modified-Since`` (304), ``Range`` / ``If-Range`` (206 for a
single satisfiable range, 416 when nothing is satisfiable). Requests for
several ranges at once are answered with the full body.
"""

import mimetypes
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime

from prpl.errors import HTTPError
from prpl.http.request import Request
from prpl.http.response import Response


def guess_content_type(name: str) -> str:
    """Content type for a file name; text types are declared UTF-8."""
    content_type, _ = mimetypes.guess_type(name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/"):
        return f"{content_type}; charset=utf-8"
    return content_type


def http_date(moment: datetime) -> str:
    """Format *moment* as an IMF-fixdate (``Sun, 06 Nov 1994 08:49:37 GMT``)."""
    return format_datetime(moment.astimezone(UTC).replace(microsecond=0), usegmt=True)


def _not_modified(request: Request, modified: datetime) -> bool:
    if request.method not in ("GET", "HEAD"):
        return False
    since = request.headers.get("if-modified-since")
    if not since:
        return False
    try:
        parsed = parsedate_to_datetime(since)
    except (TypeError, ValueError):
        return False
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return modified.astimezone(UTC).replace(microsecond=0) <= parsed


def parse_range(header: str, size: int) -> tuple[int, int] | None:
    """Parse a single ``bytes=`` range into inclusive ``(start, end)``.

    Returns None when the header should be ignored (syntax the server
    does not honour, or more than one range).

    Raises:
        HTTPError: 416 when the range cannot be satisfied.
    """
    unit, _, ranges = header.partition("=")
    if unit.strip().lower() != "bytes" or not ranges or "," in ranges:
        return None
    first, dash, last = ranges.strip().partition("-")
    if not dash:
        return None
    first, last = first.strip(), last.strip()
    try:
        if not first:
            # Suffix range: the final N bytes
            length = int(last)
            if length <= 0:
                raise _unsatisfiable(size)
            return max(size - length, 0), size - 1
        start = int(first)
        end = int(last) if last else size - 1
    except ValueError:
        return None
    if start < 0 or end < start:
        return None
    if start >= size:
        raise _unsatisfiable(size)
    return start, min(end, size - 1)


def _unsatisfiable(size: int) -> HTTPError:
    return HTTPError(
        status=416,
        detail="Requested Range Not Satisfiable",
        headers=(("Content-Range", f"bytes */{size}"),),
    )


def serve_content(
    request: Request,
    name: str,
    data: bytes,
    modified: datetime | None = None,
) -> Response:
    """Build a response for *data*, honouring conditional and range headers.

    Args:
        request: The inbound request (method and headers are consulted).
        name: File name used to guess the content type.
        data: Full content.
        modified: Last modification time; enables ``Last-Modified``,
            ``If-Modified-Since`` and date-based ``If-Range``.
    """
    content_type = guess_content_type(name)
    last_modified = http_date(modified) if modified is not None else None

    if modified is not None and _not_modified(request, modified):
        assert last_modified is not None
        return Response(status=304, content_type=content_type).with_header(
            "Last-Modified", last_modified
        )

    response = Response(body=data, content_type=content_type).with_header("Accept-Ranges", "bytes")
    if last_modified is not None:
        response = response.with_header("Last-Modified", last_modified)

    range_header = request.headers.get("range")
    if not range_header or request.method not in ("GET", "HEAD"):
        return response

    if_range = request.headers.get("if-range")
    if if_range and if_range != last_modified:
        return response

    span = parse_range(range_header, len(data))
    if span is None:
        return response
    start, end = span
    return (
        Response(
            body=data[start : end + 1],
            status=206,
            content_type=content_type,
            headers=response.headers,
        )
        .with_header("Content-Range", f"bytes {start}-{end}/{len(data)}")
    )
