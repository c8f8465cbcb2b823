"""Shared fixtures: an on-disk tree with a modern and a legacy build."""

import json

import pytest

from prpl.capabilities import Capability
from prpl.config import ProjectConfig, ServerConfig
from prpl.http.request import PUSH_EXTENSION, Request

MODERN_UA = "Mozilla/5.0 Modern"
LEGACY_UA = "Mozilla/4.0 Legacy"


def classify(user_agent: str) -> Capability:
    """Test classifier: "Modern" browsers get ES2015 + push."""
    if "Modern" in user_agent:
        return Capability.ES2015 | Capability.PUSH
    return Capability(0)


@pytest.fixture
def build_root(tmp_path):
    """A server root holding ``polymer.json`` and two builds."""
    root = tmp_path / "build"
    root.mkdir()

    (root / "polymer.json").write_text(
        json.dumps(
            {
                "entrypoint": "index.html",
                "shell": "src/app-shell.html",
                "builds": [
                    {"name": "legacy", "browserCapabilities": []},
                    {"name": "modern", "browserCapabilities": ["es2015", "push"]},
                ],
            }
        )
    )

    modern = root / "modern"
    (modern / "src").mkdir(parents=True)
    (modern / "index.html").write_text(
        '<html><head><base href="/modern/"></head><body>modern</body></html>'
    )
    (modern / "src" / "app-shell.html").write_text("<app-shell></app-shell>")
    (modern / "src" / "shared.js").write_text("console.log('modern');")
    (modern / "service-worker.js").write_text("self.addEventListener('fetch', () => {});")
    (modern / "push-manifest.json").write_text(
        json.dumps(
            {
                "src/app-shell.html": {"src/shared.js": {"type": "script"}},
                "src/view-home.html": {
                    "src/shared.js": {"type": "script"},
                    "src/home.css": {"type": "style"},
                },
            }
        )
    )

    legacy = root / "legacy"
    (legacy / "src").mkdir(parents=True)
    (legacy / "index.html").write_text(
        '<html><head><base href="/legacy/"></head><body>legacy</body></html>'
    )
    (legacy / "src" / "shared.js").write_text("console.log('legacy');")

    return root


@pytest.fixture
def project() -> ProjectConfig:
    return ProjectConfig.from_dict(
        {
            "shell": "src/app-shell.html",
            "builds": [
                {"name": "legacy", "browserCapabilities": []},
                {"name": "modern", "browserCapabilities": ["es2015", "push"]},
            ],
        }
    )


@pytest.fixture
def server_config(build_root) -> ServerConfig:
    return ServerConfig(root=build_root, version="v1", routes={"/home": "src/view-home.html"})


def make_request(
    path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    push: bool = False,
) -> Request:
    """A Request as the ASGI handler would build it."""
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "extensions": {PUSH_EXTENSION: {}} if push else {},
    }
    return Request.from_asgi(scope)
