"""Push-header compilation.

Each build gets a precomputed map from URL path to the preload links
that should accompany a response for that path. Two kinds of entries:

- **Manifest entries**: keyed by the prefixed served file, one link per
  dependency listed in the build's push manifest.
- **Route entries**: keyed by the bare route pattern. The app-shell
  bootstrap (loader script, shell document, shell dependencies) followed
  by the route's fragment and its dependencies, deduplicated.

Route entries are written last and replace a manifest entry with the
same key.
"""

import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from prpl.config import DEFAULT_LOADER_PATH
from prpl.manifest import AssetDependency, AssetManifest


@dataclass(frozen=True, slots=True)
class PreloadLink:
    """A ``Link: rel=preload`` target. Compared by its header value."""

    path: str
    type: str

    def __str__(self) -> str:
        return f"<{self.path}>; rel=preload; as={self.type}"


type PushHeaders = Mapping[str, tuple[PreloadLink, ...]]


def join_url(prefix: str, path: str) -> str:
    """Join and clean URL path segments (``/v1/app/`` + ``a.js``)."""
    joined = posixpath.normpath(prefix + "/" + path.lstrip("/"))
    # normpath keeps a leading "//" per POSIX; URLs never want it.
    if joined.startswith("//"):
        joined = "/" + joined.lstrip("/")
    return joined


def _links(prefix: str, deps: Iterable[AssetDependency]) -> list[PreloadLink]:
    return [PreloadLink(join_url(prefix, dep.path), dep.type) for dep in deps]


def compile_push_headers(
    manifest: AssetManifest,
    routes: Mapping[str, str],
    shell: str,
    prefix: str,
    *,
    loader_path: str = DEFAULT_LOADER_PATH,
) -> PushHeaders:
    """Build the path -> preload links map for one build.

    Args:
        manifest: The build's push manifest.
        routes: Route pattern -> fragment document name.
        shell: The app-shell document, relative to the build directory.
        prefix: URL prefix of the build, ``<version prefix><name>/``.
        loader_path: Web components loader script, relative to the build.
    """
    headers: dict[str, tuple[PreloadLink, ...]] = {}

    for served, deps in manifest.items():
        headers[join_url(prefix, served)] = tuple(_links(prefix, deps))

    empty: tuple[AssetDependency, ...] = ()
    for route, fragment in routes.items():
        candidates = [
            PreloadLink(join_url(prefix, loader_path), "script"),
            PreloadLink(join_url(prefix, shell), "document"),
            *_links(prefix, manifest.get(shell, empty)),
            PreloadLink(join_url(prefix, fragment), "document"),
            *_links(prefix, manifest.get(fragment, empty)),
        ]
        seen: set[str] = set()
        links: list[PreloadLink] = []
        for link in candidates:
            key = str(link)
            if key in seen:
                continue
            seen.add(key)
            links.append(link)
        headers[route] = tuple(links)

    return MappingProxyType(headers)
