"""Static file server for build assets.

Serves files below a root directory by relative path. Used by the
dispatcher for everything under the version prefix that is not a
startup-cached entrypoint. Caching headers are the dispatcher's
concern; this module only produces the file (or raises).
"""

from datetime import UTC, datetime
from pathlib import Path

import anyio.to_thread

from prpl.errors import Forbidden, NotFound
from prpl.http.content import serve_content
from prpl.http.request import Request
from prpl.http.response import Response


class StaticFiles:
    """Serves files from a directory with range and conditional support.

    Security: resolves symlinks and verifies the final path
    is within the configured directory to prevent path traversal.

    Usage::

        files = StaticFiles("./build")
        response = await files.serve(request, "es6-bundled/src/app.js")
    """

    __slots__ = ("_directory", "_index")

    def __init__(self, directory: str | Path, *, index: str = "index.html") -> None:
        self._directory = Path(directory).resolve()
        self._index = index

    @property
    def directory(self) -> Path:
        return self._directory

    async def serve(self, request: Request, relative: str) -> Response:
        """Serve *relative* (a path below the directory).

        Raises:
            Forbidden: If the path escapes the directory.
            NotFound: If no regular file (or directory index) exists.
        """
        relative = relative.lstrip("/")
        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            raise Forbidden

        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                raise NotFound
            # Relative URLs in the index only resolve under a trailing slash
            if relative and not request.path.endswith("/"):
                return Response(body="", status=301).with_header("Location", request.path + "/")
            file_path = index_path

        if not file_path.is_file():
            raise NotFound

        data, modified = await anyio.to_thread.run_sync(_read, file_path)
        return serve_content(request, file_path.name, data, modified)


def _read(path: Path) -> tuple[bytes, datetime]:
    try:
        data = path.read_bytes()
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        raise NotFound from None
    return data, datetime.fromtimestamp(mtime, tz=UTC)
