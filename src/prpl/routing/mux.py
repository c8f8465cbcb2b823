"""Path multiplexer in the style of a classic HTTP serve mux.

Two kinds of pattern:

- ``/static/app/index.html`` matches that path exactly.
- ``/static/`` (trailing slash) matches the whole subtree below it.

Exact patterns win; among subtrees the longest prefix wins, so ``/``
is the catch-all.

Request paths are matched in canonical form only: ``canonical`` cleans
``//``, ``.`` and ``..`` segments and adds the trailing slash a bare
subtree name is missing, and the handler redirects anything else there.
"""

import posixpath
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from prpl.errors import ConfigurationError, NotFound
from prpl.http.request import Request
from prpl.http.response import Response

type Handler = Callable[[Request], Response | Awaitable[Response]]


@dataclass(frozen=True, slots=True)
class Route:
    """A registered pattern and the handler it dispatches to."""

    pattern: str
    handler: Handler

    @property
    def is_subtree(self) -> bool:
        return self.pattern.endswith("/")


class ServeMux:
    """Compiled pattern table.

    Usage::

        mux = ServeMux()
        mux.add("/static/app/index.html", entrypoint)
        mux.add("/static/", assets)
        mux.add("/", entrypoint)
        mux.compile()
        route = mux.match("/static/app/bundle.js")  # -> assets
    """

    __slots__ = ("_compiled", "_exact", "_subtrees")

    def __init__(self) -> None:
        self._exact: dict[str, Route] = {}
        self._subtrees: list[Route] = []
        self._compiled = False

    def add(self, pattern: str, handler: Handler) -> None:
        """Register *handler* for *pattern*. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if not pattern.startswith("/"):
            msg = f"Pattern {pattern!r} must start with '/'"
            raise ConfigurationError(msg)

        route = Route(pattern, handler)
        if route.is_subtree:
            if any(r.pattern == pattern for r in self._subtrees):
                msg = f"Multiple registrations for {pattern!r}"
                raise ConfigurationError(msg)
            self._subtrees.append(route)
        else:
            if pattern in self._exact:
                msg = f"Multiple registrations for {pattern!r}"
                raise ConfigurationError(msg)
            self._exact[pattern] = route

    def compile(self) -> None:
        """Freeze the table; longest subtree first."""
        self._subtrees.sort(key=lambda r: len(r.pattern), reverse=True)
        self._compiled = True

    def canonical(self, path: str) -> str:
        """Return the path *path* should be served under.

        ``/a//b/./c/../`` becomes ``/a/b/``; a trailing slash survives
        cleaning. ``/static`` becomes ``/static/`` when only the subtree
        ``/static/`` is registered.
        """
        cleaned = clean_path(path)
        if cleaned not in self._exact and any(
            r.pattern == cleaned + "/" for r in self._subtrees
        ):
            return cleaned + "/"
        return cleaned

    def match(self, path: str) -> Route:
        """Return the route for *path*.

        Raises:
            NotFound: If no pattern matches.
        """
        route = self._exact.get(path)
        if route is not None:
            return route
        for route in self._subtrees:
            if path.startswith(route.pattern):
                return route
        raise NotFound

    @property
    def patterns(self) -> tuple[str, ...]:
        """All registered patterns, exact first."""
        return (*self._exact, *(r.pattern for r in self._subtrees))


def clean_path(path: str) -> str:
    """Canonical form of a URL path: rooted, no empty, ``.`` or ``..`` segments."""
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" per POSIX
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned
