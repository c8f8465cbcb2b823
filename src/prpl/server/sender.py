"""ASGI response sending — translates prpl Responses to ASGI messages.

Push promises go out first, as ``http.response.push`` messages, so the
client learns about pushed resources before it parses the body.
"""

from prpl._internal.asgi import Send
from prpl.http.request import PUSH_EXTENSION
from prpl.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode(pairs: tuple[tuple[str, str], ...]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a prpl Response into ASGI send() calls.

    Args:
        response: The response to send.
        send: ASGI send callable.
        head: Answering a HEAD request: headers describe the full
            body, but no body bytes are sent.
    """
    for promise in response.pushes:
        await send(
            {
                "type": PUSH_EXTENSION,
                "path": promise.path,
                "headers": _encode(promise.headers),
            }
        )

    raw_headers = [(b"content-type", response.content_type.encode("latin-1"))]
    raw_headers.extend(_encode(response.headers))

    body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
