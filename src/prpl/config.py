"""Server and project configuration.

``ServerConfig`` is a frozen dataclass, immutable after creation.
``ProjectConfig`` is the parsed ``polymer.json`` project file that
declares the builds.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from prpl.errors import ConfigurationError

DEFAULT_LOADER_PATH = "bower_components/webcomponentsjs/webcomponents-loader.js"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """One declared build: a name and the capabilities it requires."""

    name: str
    browser_capabilities: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """The project file: build declarations, entrypoint and shell names."""

    entrypoint: str = "index.html"
    shell: str = ""
    builds: tuple[BuildConfig, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProjectConfig:
        """Build a ProjectConfig from decoded JSON.

        Raises:
            ConfigurationError: If a field has the wrong shape.
        """
        if not isinstance(data, Mapping):
            msg = "Project config must be a JSON object"
            raise ConfigurationError(msg)

        entrypoint = data.get("entrypoint") or "index.html"
        shell = data.get("shell") or ""
        if not isinstance(entrypoint, str) or not isinstance(shell, str):
            msg = "'entrypoint' and 'shell' must be strings"
            raise ConfigurationError(msg)

        raw_builds = data.get("builds") or []
        if not isinstance(raw_builds, list):
            msg = "'builds' must be a list"
            raise ConfigurationError(msg)

        builds: list[BuildConfig] = []
        for i, raw in enumerate(raw_builds):
            if not isinstance(raw, Mapping):
                msg = f"Build at offset {i} must be an object"
                raise ConfigurationError(msg)
            name = raw.get("name") or ""
            capabilities = raw.get("browserCapabilities") or []
            if (
                not isinstance(name, str)
                or not isinstance(capabilities, list)
                or not all(isinstance(c, str) for c in capabilities)
            ):
                msg = f"Build at offset {i} has an invalid name or browserCapabilities"
                raise ConfigurationError(msg)
            builds.append(BuildConfig(name=name, browser_capabilities=tuple(capabilities)))

        return cls(entrypoint=entrypoint, shell=shell, builds=tuple(builds))


def load_project_config(path: str | Path) -> ProjectConfig:
    """Read and parse a ``polymer.json`` project file.

    Raises:
        ConfigurationError: If the file is missing or not valid JSON.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read project config {path}: {exc}"
        raise ConfigurationError(msg) from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in project config {path}: {exc}"
        raise ConfigurationError(msg) from exc
    return ProjectConfig.from_dict(data)


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(root="build", version="v42", routes={"/": "my-app.html"})
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    log_level: str = "info"
    workers: int = 1  # 0 = auto-detect from CPU count

    # TLS (optional)
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None

    # Builds
    root: str | Path = "."
    version: str = "static"
    project_file: str | Path = "polymer.json"
    routes: Mapping[str, str] = field(default_factory=dict)

    # Push headers
    loader_path: str = DEFAULT_LOADER_PATH

    # Service worker served with a widened scope and no caching
    service_worker: str = "service-worker.js"

    def __post_init__(self) -> None:
        # Routes are read on every request; freeze them.
        object.__setattr__(self, "routes", MappingProxyType(dict(self.routes)))

    @property
    def version_prefix(self) -> str:
        """URL prefix all build assets live under, e.g. ``/static/``."""
        stripped = self.version.strip("/")
        return f"/{stripped}/" if stripped else "/"
