"""Build registry — the ordered set of differentially served builds.

Builds are loaded once at startup from the project config and the files
on disk, then sorted so that the first build a client can serve is the
most capable one it supports:

1. More required capabilities first (higher population count).
2. Ties keep declaration order.

A build with no requirements is the fallback every browser can use.
Without one, some browsers will get an error.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import overload

from prpl.capabilities import Capability, can_serve
from prpl.config import DEFAULT_LOADER_PATH, ProjectConfig
from prpl.errors import AssetReadError, ConfigurationError, ManifestParseError
from prpl.files import CachedFile, FileCache
from prpl.manifest import EMPTY_MANIFEST, MANIFEST_FILENAME, read_manifest
from prpl.push import PreloadLink, PushHeaders, compile_push_headers
from prpl.templates import Template, TemplateFactory, create_default_template

logger = logging.getLogger("prpl.builds")


@dataclass(frozen=True, slots=True)
class Build:
    """One pre-built variant of the application."""

    name: str
    config_order: int
    requirements: Capability
    entrypoint: str
    push_headers: PushHeaders = field(default_factory=lambda: MappingProxyType({}), compare=False)
    template: Template | None = field(default=None, compare=False)

    def can_serve(self, client: int) -> bool:
        """True if a client with capabilities *client* can run this build."""
        return can_serve(client, self.requirements)

    def links_for(self, path: str, version_prefix: str) -> tuple[PreloadLink, ...]:
        """Preload links for *path*, trying the bare then the versioned key."""
        links = self.push_headers.get(path)
        if links is None:
            links = self.push_headers.get(version_prefix + path, ())
        return links


class BuildRegistry(Sequence[Build]):
    """Immutable, priority-ordered builds.

    Sorting happens once, here; the order is what ``find_build`` walks.
    """

    __slots__ = ("_builds",)

    def __init__(self, builds: Iterable[Build] = ()) -> None:
        self._builds: tuple[Build, ...] = tuple(
            sorted(builds, key=lambda b: (-b.requirements.size, b.config_order))
        )

    @overload
    def __getitem__(self, index: int) -> Build: ...
    @overload
    def __getitem__(self, index: slice) -> tuple[Build, ...]: ...
    def __getitem__(self, index: int | slice) -> Build | tuple[Build, ...]:
        return self._builds[index]

    def __len__(self) -> int:
        return len(self._builds)

    def __iter__(self) -> Iterator[Build]:
        return iter(self._builds)

    def __repr__(self) -> str:
        return f"BuildRegistry({[b.name for b in self._builds]!r})"

    @property
    def has_fallback(self) -> bool:
        """True if some build has no requirements."""
        return any(not b.requirements for b in self._builds)

    def find_build(self, client: int) -> Build | None:
        """Return the highest-priority build *client* can run, or None."""
        for build in self._builds:
            if build.can_serve(client):
                return build
        return None


@dataclass(frozen=True, slots=True)
class _Declared:
    name: str
    config_order: int
    requirements: Capability
    entrypoint: str
    directory: Path


def _declared_builds(project: ProjectConfig | None, root: Path) -> list[_Declared]:
    entrypoint = (project.entrypoint if project else "") or "index.html"

    if project is None or not project.builds:
        logger.warning("No builds configured; serving %s as a single build", root)
        return [_Declared("", 0, Capability(0), entrypoint, root)]

    declared: list[_Declared] = []
    for i, decl in enumerate(project.builds):
        if not decl.name:
            logger.warning("Build at offset %d has no name; skipping.", i)
            continue
        try:
            requirements = Capability.from_tokens(decl.browser_capabilities)
        except ConfigurationError as exc:
            logger.warning("Build %r skipped: %s", decl.name, exc)
            continue
        declared.append(
            _Declared(
                name=decl.name,
                config_order=i,
                requirements=requirements,
                entrypoint=f"{decl.name}/{entrypoint}",
                directory=root / decl.name,
            )
        )
    return declared


def _read_entrypoint(root: Path, decl: _Declared, version_prefix: str) -> CachedFile:
    """Read the entrypoint and point its ``<base href>`` at the versioned URL."""
    path = root / decl.entrypoint
    if not decl.directory.is_dir():
        raise AssetReadError(str(decl.directory), "build directory does not exist")
    try:
        data = path.read_bytes()
        modified = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
    except OSError as exc:
        raise AssetReadError(str(path), exc.strerror or str(exc)) from exc

    data = data.replace(
        f'<base href="/{decl.name}/">'.encode(),
        f'<base href="{version_prefix}{decl.name}/">'.encode(),
        1,
    )
    return CachedFile(data=data, modified=modified)


def load_builds(
    project: ProjectConfig | None,
    root: str | Path,
    routes: Mapping[str, str],
    version_prefix: str,
    template_factory: TemplateFactory = create_default_template,
    *,
    loader_path: str = DEFAULT_LOADER_PATH,
) -> tuple[BuildRegistry, FileCache]:
    """Load every declared build from *root*.

    Returns the ordered registry and the cache of entrypoint documents,
    keyed by their root-relative path.

    Builds with no name, unknown capabilities, or an unreadable
    entrypoint are skipped with a warning. A malformed push manifest
    only costs that build its push headers.

    Raises:
        ConfigurationError: If no build is left to serve.
    """
    root = Path(root)
    shell = project.shell if project else ""
    builds: list[Build] = []
    files: dict[str, CachedFile] = {}

    for decl in _declared_builds(project, root):
        try:
            cached = _read_entrypoint(root, decl, version_prefix)
        except AssetReadError as exc:
            logger.warning("Build %r excluded, cannot read entrypoint: %s", decl.name, exc)
            continue

        try:
            manifest = read_manifest(decl.directory / MANIFEST_FILENAME)
        except ManifestParseError as exc:
            logger.warning("Ignoring push manifest for build %r: %s", decl.name, exc)
            manifest = EMPTY_MANIFEST

        files[decl.entrypoint] = cached
        builds.append(
            Build(
                name=decl.name,
                config_order=decl.config_order,
                requirements=decl.requirements,
                entrypoint=decl.entrypoint,
                push_headers=compile_push_headers(
                    manifest,
                    routes,
                    shell,
                    f"{version_prefix}{decl.name}/",
                    loader_path=loader_path,
                ),
                template=template_factory(decl.entrypoint, cached.data, cached.modified),
            )
        )
        logger.debug(
            "Loaded build %r (requires %s, %d push entries)",
            decl.name,
            decl.requirements,
            len(builds[-1].push_headers),
        )

    if not builds:
        msg = f"No servable builds under {root}"
        raise ConfigurationError(msg)

    registry = BuildRegistry(builds)
    if not registry.has_fallback:
        logger.warning(
            "All builds have a capability requirement. "
            "Some browsers will display an error. Consider a fallback build."
        )
    return registry, FileCache(files)
