"""Tests for prpl.push: compiling per-build preload links."""

from types import MappingProxyType

import pytest

from prpl.manifest import AssetDependency
from prpl.push import PreloadLink, compile_push_headers, join_url

LOADER = "bower_components/webcomponentsjs/webcomponents-loader.js"


def _manifest(data: dict[str, dict[str, str]]):
    return MappingProxyType(
        {
            served: tuple(AssetDependency(path, kind) for path, kind in deps.items())
            for served, deps in data.items()
        }
    )


class TestPreloadLink:
    def test_canonical_form(self) -> None:
        link = PreloadLink("/v1/modern/b.js", "script")
        assert str(link) == "</v1/modern/b.js>; rel=preload; as=script"

    def test_equality(self) -> None:
        assert PreloadLink("/a.js", "script") == PreloadLink("/a.js", "script")
        assert PreloadLink("/a.js", "script") != PreloadLink("/a.js", "fetch")


class TestJoinURL:
    @pytest.mark.parametrize(
        ("prefix", "path", "expected"),
        [
            ("/v1/modern/", "a.js", "/v1/modern/a.js"),
            ("/v1/modern/", "/a.js", "/v1/modern/a.js"),
            ("/v1/modern/", "src/../a.js", "/v1/modern/a.js"),
            ("/v1//", "a.js", "/v1/a.js"),
            ("/v1/modern/", "", "/v1/modern"),
        ],
    )
    def test_join(self, prefix: str, path: str, expected: str) -> None:
        assert join_url(prefix, path) == expected


class TestManifestEntries:
    def test_prefixed_key_and_links(self) -> None:
        headers = compile_push_headers(
            _manifest({"a.js": {"b.js": "script"}}), {}, "shell.html", "/v1/modern/"
        )
        assert dict(headers) == {
            "/v1/modern/a.js": (PreloadLink("/v1/modern/b.js", "script"),),
        }
        assert str(headers["/v1/modern/a.js"][0]) == "</v1/modern/b.js>; rel=preload; as=script"

    def test_order_preserved_without_dedup(self) -> None:
        manifest = MappingProxyType(
            {
                "a.js": (
                    AssetDependency("z.js", "script"),
                    AssetDependency("y.css", "style"),
                    AssetDependency("z.js", "script"),
                )
            }
        )
        headers = compile_push_headers(manifest, {}, "", "/p/")
        assert [str(link) for link in headers["/p/a.js"]] == [
            "</p/z.js>; rel=preload; as=script",
            "</p/y.css>; rel=preload; as=style",
            "</p/z.js>; rel=preload; as=script",
        ]


class TestRouteEntries:
    def test_bootstrap_order_with_empty_manifest(self) -> None:
        headers = compile_push_headers(
            _manifest({}), {"/home": "home-view.html"}, "shell.html", "/v1/modern/"
        )
        assert headers["/home"] == (
            PreloadLink(f"/v1/modern/{LOADER}", "script"),
            PreloadLink("/v1/modern/shell.html", "document"),
            PreloadLink("/v1/modern/home-view.html", "document"),
        )

    def test_key_is_bare_route(self) -> None:
        headers = compile_push_headers(_manifest({}), {"/home": "h.html"}, "s.html", "/v1/b/")
        assert "/home" in headers
        assert "/v1/b//home" not in headers

    def test_shell_then_fragment_dependencies(self) -> None:
        manifest = _manifest(
            {
                "shell.html": {"shell.js": "script"},
                "view.html": {"view.js": "script", "view.css": "style"},
            }
        )
        headers = compile_push_headers(manifest, {"/view": "view.html"}, "shell.html", "/p/")
        assert [link.path for link in headers["/view"]] == [
            f"/p/{LOADER}",
            "/p/shell.html",
            "/p/shell.js",
            "/p/view.html",
            "/p/view.js",
            "/p/view.css",
        ]

    def test_shared_dependency_appears_once_at_first_position(self) -> None:
        manifest = _manifest(
            {
                "shell.html": {"common.js": "script", "shell.css": "style"},
                "view.html": {"view.js": "script", "common.js": "script"},
            }
        )
        links = compile_push_headers(manifest, {"/v": "view.html"}, "shell.html", "/p/")["/v"]
        rendered = [str(link) for link in links]
        assert rendered.count("</p/common.js>; rel=preload; as=script") == 1
        assert rendered.index("</p/common.js>; rel=preload; as=script") == 2
        assert rendered[-1] == "</p/view.js>; rel=preload; as=script"

    def test_same_path_different_type_not_deduplicated(self) -> None:
        manifest = _manifest(
            {"shell.html": {"data.json": "fetch"}, "view.html": {"data.json": "script"}}
        )
        links = compile_push_headers(manifest, {"/v": "view.html"}, "shell.html", "/p/")["/v"]
        assert [link.type for link in links if link.path == "/p/data.json"] == ["fetch", "script"]

    def test_fragment_listed_by_shell_not_repeated(self) -> None:
        manifest = _manifest({"shell.html": {"view.html": "document"}})
        links = compile_push_headers(manifest, {"/v": "view.html"}, "shell.html", "/p/")["/v"]
        assert [str(link) for link in links].count("</p/view.html>; rel=preload; as=document") == 1

    def test_custom_loader(self) -> None:
        headers = compile_push_headers(
            _manifest({}), {"/": "v.html"}, "s.html", "/p/", loader_path="vendor/loader.js"
        )
        assert headers["/"][0] == PreloadLink("/p/vendor/loader.js", "script")

    def test_route_overwrites_colliding_manifest_entry(self) -> None:
        manifest = _manifest({"page": {"old.js": "script"}})
        headers = compile_push_headers(manifest, {"/p/page": "v.html"}, "s.html", "/p/")
        assert PreloadLink("/p/old.js", "script") not in headers["/p/page"]
        assert headers["/p/page"][-1] == PreloadLink("/p/v.html", "document")

    def test_result_is_read_only(self) -> None:
        headers = compile_push_headers(_manifest({}), {"/": "v.html"}, "s.html", "/p/")
        with pytest.raises(TypeError):
            headers["/x"] = ()  # type: ignore[index]
        assert isinstance(headers["/"], tuple)
