"""Push manifest reader.

A push manifest describes, for each served file, the resources it
depends on::

    {
      "index.html": {
        "app.js": {"type": "script"},
        "app.css": {"type": "style"}
      }
    }

A missing manifest is normal (the build simply has nothing to preload).
A malformed one raises ``ManifestParseError`` so the caller can decide
to log and carry on.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from prpl.errors import ManifestParseError

MANIFEST_FILENAME = "push-manifest.json"


@dataclass(frozen=True, slots=True)
class AssetDependency:
    """A resource a served file depends on."""

    path: str
    type: str


type AssetManifest = Mapping[str, tuple[AssetDependency, ...]]

EMPTY_MANIFEST: AssetManifest = MappingProxyType({})


def read_manifest(path: str | Path) -> AssetManifest:
    """Read a push manifest, preserving the document's key order.

    Returns an empty manifest when *path* does not exist.

    Raises:
        ManifestParseError: If the file is unreadable, not JSON, or
            not shaped ``{file: {asset: {"type": str}}}``.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return EMPTY_MANIFEST
    except OSError as exc:
        raise ManifestParseError(str(path), str(exc)) from exc

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestParseError(str(path), f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestParseError(str(path), "top level must be an object")

    manifest: dict[str, tuple[AssetDependency, ...]] = {}
    for served, assets in data.items():
        if not isinstance(assets, dict):
            raise ManifestParseError(str(path), f"entry {served!r} must be an object")
        deps: list[AssetDependency] = []
        for asset, descriptor in assets.items():
            kind = descriptor.get("type") if isinstance(descriptor, dict) else None
            if not isinstance(kind, str) or not kind:
                msg = f"asset {asset!r} of {served!r} has no string 'type'"
                raise ManifestParseError(str(path), msg)
            deps.append(AssetDependency(path=asset, type=kind))
        manifest[served] = tuple(deps)
    return MappingProxyType(manifest)
