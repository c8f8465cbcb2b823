"""Entrypoint document templates.

Each build's entrypoint (its ``index.html``) is wrapped in a template
object at startup. Anything with ``render(request) -> Response`` (sync
or async) qualifies; the factory that creates it is pluggable::

    app = PRPL(config, template_factory=kida_template_factory(site="Acme"))

``RawTemplate`` is the default: it serves the cached bytes unchanged,
with conditional and range support. ``KidaTemplate`` compiles the
document as a kida template so per-request values can be rendered in.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Protocol

from kida import Environment

from prpl.http.content import serve_content
from prpl.http.request import Request
from prpl.http.response import Response


class Template(Protocol):
    """Renders a build's entrypoint document for one request."""

    def render(self, request: Request) -> Response | Awaitable[Response]: ...


type TemplateFactory = Callable[[str, bytes, datetime], Template]


class RawTemplate:
    """Serves the entrypoint bytes as-is."""

    __slots__ = ("data", "modified", "name")

    def __init__(self, name: str, data: bytes, modified: datetime) -> None:
        self.name = name
        self.data = data
        self.modified = modified

    def render(self, request: Request) -> Response:
        return serve_content(request, self.name, self.data, self.modified)


def create_default_template(name: str, data: bytes, modified: datetime) -> Template:
    """Default ``TemplateFactory``: a ``RawTemplate``."""
    return RawTemplate(name, data, modified)


class KidaTemplate:
    """Renders the entrypoint through kida on every request.

    The template receives ``request`` plus any context given to the
    factory. Compiled once, at startup.
    """

    __slots__ = ("_context", "_template", "name")

    def __init__(
        self,
        name: str,
        data: bytes,
        env: Environment,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self._template = env.from_string(data.decode("utf-8"))
        self._context = dict(context or {})

    def render(self, request: Request) -> Response:
        html = self._template.render({**self._context, "request": request})
        return Response(body=html)


def kida_template_factory(env: Environment | None = None, **context: Any) -> TemplateFactory:
    """Return a ``TemplateFactory`` producing ``KidaTemplate`` objects.

    Args:
        env: kida environment to compile with (a bare one by default).
        **context: Values made available to every render.
    """
    environment = env or Environment()

    def factory(name: str, data: bytes, modified: datetime) -> Template:
        return KidaTemplate(name, data, environment, context)

    return factory
