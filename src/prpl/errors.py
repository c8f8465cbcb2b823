"""prpl exception hierarchy.

Shared across the build loader, dispatcher, and ASGI handler so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class PrplError(Exception):
    """Base for all prpl-specific errors."""


class ConfigurationError(PrplError):
    """Raised when server or project configuration is invalid.

    Also raised by ``load_builds`` when no declared build is servable.
    """


class ManifestParseError(PrplError):
    """A push manifest exists but could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class AssetReadError(PrplError):
    """A build's entrypoint document could not be read at startup."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


@dataclass(frozen=True, slots=True)
class HTTPError(PrplError):
    """An error that maps directly to an HTTP status code.

    Raised by the mux, dispatcher, or file server. The ASGI handler
    catches these and turns them into plain-text responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403: the path resolves outside the served directory."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class UnsupportedClientError(HTTPError):
    """No build can serve the client's capabilities.

    Surfaced as a 500 with a plain-text body, matching the behaviour
    browsers have always seen from PRPL servers.
    """

    def __init__(self, detail: str = "This browser is not supported") -> None:
        super().__init__(status=500, detail=detail)
