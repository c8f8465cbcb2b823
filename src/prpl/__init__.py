"""prpl — Differential serving for progressive web apps.

Serves every browser the most capable pre-built variant of an
application it supports, with ``Link: rel=preload`` headers (or real
HTTP/2 push) for the resources each route needs.

Basic usage::

    from prpl import PRPL, ServerConfig

    app = PRPL(ServerConfig(root="build", routes={"/": "src/my-app.html"}))
    app.run()

Any ASGI server can host ``app``; ``app.run()`` uses pounce.
"""

__version__ = "0.1.0"
__all__ = [
    "PRPL",
    "AssetReadError",
    "Build",
    "BuildRegistry",
    "Capability",
    "ConfigurationError",
    "HTTPError",
    "ManifestParseError",
    "Middleware",
    "Next",
    "NotFound",
    "PreloadLink",
    "PrplError",
    "ProjectConfig",
    "Request",
    "Response",
    "ServerConfig",
    "UnsupportedClientError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import prpl`` fast while providing a clean top-level API.
    """
    if name == "PRPL":
        from prpl.app import PRPL

        return PRPL

    if name in ("ServerConfig", "ProjectConfig"):
        from prpl import config as _config

        return getattr(_config, name)

    if name in ("Build", "BuildRegistry"):
        from prpl import builds as _builds

        return getattr(_builds, name)

    if name == "Capability":
        from prpl.capabilities import Capability

        return Capability

    if name == "PreloadLink":
        from prpl.push import PreloadLink

        return PreloadLink

    if name == "Request":
        from prpl.http.request import Request

        return Request

    if name == "Response":
        from prpl.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from prpl.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "AssetReadError",
        "ConfigurationError",
        "HTTPError",
        "ManifestParseError",
        "NotFound",
        "PrplError",
        "UnsupportedClientError",
    ):
        from prpl import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
