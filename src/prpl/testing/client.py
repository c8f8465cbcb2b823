"""Async test client for PRPL applications.

Uses the same Request and Response types as production.
No wrapper translation layer.
"""

from __future__ import annotations

from typing import Any

from prpl._internal.asgi import Scope
from prpl.app import PRPL
from prpl.http.request import PUSH_EXTENSION
from prpl.http.response import PushPromise, Response


class TestClient:
    """Async test client for PRPL applications.

    Returns the same ``Response`` type used in production. Sends requests
    through the ASGI interface directly, no HTTP involved.

    Pass ``push=True`` to advertise the HTTP/2 server push extension;
    pushed resources are recorded on ``response.pushes``.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/", user_agent="Mozilla/5.0 ...")
            assert response.status == 200
    """

    __test__ = False  # Tell pytest this is not a test class
    __slots__ = ("app", "push")

    def __init__(self, app: PRPL, *, push: bool = False) -> None:
        self.app = app
        self.push = push

    async def __aenter__(self) -> TestClient:
        """Run the lifespan protocol so the builds load before any request."""
        messages = iter(({"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}))
        failures: list[str] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            if message["type"] == "lifespan.startup.failed":
                failures.append(message.get("message", ""))

        await self.app({"type": "lifespan", "asgi": {"version": "3.0"}}, receive, send)
        if failures:
            msg = f"Lifespan startup failed: {failures[0]}"
            raise RuntimeError(msg)
        return self

    async def __aexit__(self, *args: object) -> None:
        pass

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        user_agent: str | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers, user_agent=user_agent)

    async def head(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        user_agent: str | None = None,
    ) -> Response:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers, user_agent=user_agent)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        user_agent: str | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        # Split path and query string
        path_part, _, query_string = path.partition("?")

        # Build raw ASGI headers
        merged = dict(headers or {})
        if user_agent is not None:
            merged["user-agent"] = user_agent
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in merged.items()
        ]

        scope: Scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "2" if self.push else "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
            "extensions": {PUSH_EXTENSION: {}} if self.push else {},
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        # Capture response via send
        response_status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []
        pushes: list[PushPromise] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == PUSH_EXTENSION:
                pushes.append(
                    PushPromise(
                        path=message["path"],
                        headers=tuple(
                            (n.decode("latin-1"), v.decode("latin-1"))
                            for n, v in message.get("headers", [])
                        ),
                    )
                )
            elif message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        # Build a prpl Response from captured data
        content_type = "text/html; charset=utf-8"
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            else:
                extra_headers.append((name_str, value_str))

        return Response(
            body=b"".join(response_body_parts),
            status=response_status,
            content_type=content_type,
            headers=tuple(extra_headers),
            pushes=tuple(pushes),
        )
