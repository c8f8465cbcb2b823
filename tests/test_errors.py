"""Tests for prpl.errors and the error-to-response mapping."""

import logging

import pytest
from conftest import make_request

from prpl.errors import (
    AssetReadError,
    ConfigurationError,
    Forbidden,
    HTTPError,
    ManifestParseError,
    NotFound,
    PrplError,
    UnsupportedClientError,
)
from prpl.server.errors import TEXT_PLAIN, handle_http_error, handle_internal_error


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            ConfigurationError("x"),
            ManifestParseError("m.json", "bad"),
            AssetReadError("index.html", "gone"),
            HTTPError(status=418),
            NotFound(),
        ],
    )
    def test_all_are_prpl_errors(self, exc: Exception) -> None:
        assert isinstance(exc, PrplError)

    def test_http_subclasses(self) -> None:
        assert NotFound().status == 404
        assert Forbidden().status == 403
        assert UnsupportedClientError().status == 500
        assert UnsupportedClientError().detail == "This browser is not supported"

    def test_path_errors_carry_context(self) -> None:
        exc = ManifestParseError("build/push-manifest.json", "invalid JSON")
        assert exc.path == "build/push-manifest.json"
        assert exc.reason == "invalid JSON"
        assert str(exc) == "build/push-manifest.json: invalid JSON"

    def test_http_error_str(self) -> None:
        assert str(HTTPError(status=404, detail="Not Found")) == "404: Not Found"
        assert str(HTTPError(status=500)) == "500"


class TestHandleHTTPError:
    def test_plain_text(self) -> None:
        response = handle_http_error(UnsupportedClientError(), make_request("/"))
        assert response.status == 500
        assert response.content_type == TEXT_PLAIN
        assert response.text == "This browser is not supported"

    def test_headers_copied(self) -> None:
        exc = HTTPError(status=416, headers=(("Content-Range", "bytes */10"),))
        response = handle_http_error(exc, make_request("/"))
        assert response.header("Content-Range") == "bytes */10"
        assert response.text == "Error 416"


class TestHandleInternalError:
    def test_logged_and_hidden(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="prpl.server"):
            try:
                raise ValueError("boom")
            except ValueError as exc:
                response = handle_internal_error(exc, make_request("/x"))
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "500 GET /x" in caplog.text

    def test_debug_shows_traceback(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError as exc:
            response = handle_internal_error(exc, make_request("/x"), debug=True)
        assert "ValueError: boom" in response.text
