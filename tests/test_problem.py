"""
Tests for Problem Details rendering and Accept-header negotiation.
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docstore.errors import NotFoundError, RedirectError
from docstore.problem import Content, negotiate_content, register_handlers


@pytest.fixture()
def error_client():
    app = FastAPI()
    register_handlers(app)

    @app.get("/missing")
    def missing():
        raise NotFoundError("no such thing")

    @app.get("/login-required")
    def login_required():
        raise RedirectError("no token", "http://localhost:3000/login", 401)

    @app.get("/crash")
    def crash():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.mark.parametrize(
    "accept,expected",
    [
        ("", Content.JSON),
        ("*/*", Content.JSON),
        ("application/json", Content.JSON),
        ("text/plain", Content.TEXT),
        ("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8", Content.HTML),
        ("application/json;q=0.5, text/plain", Content.TEXT),
        ("text/plain, text/html", Content.TEXT),
    ],
)
def test_negotiate_content(accept, expected):
    assert negotiate_content(accept) is expected


class TestRendering:
    def test_json_problem(self, error_client):
        resp = error_client.get("/missing", headers={"Accept": "application/json"})
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.json() == {
            "type": "about:blank",
            "title": "Not Found",
            "status": 404,
            "detail": "no such thing",
            "instance": "/missing",
        }

    def test_plain_text(self, error_client):
        resp = error_client.get("/missing", headers={"Accept": "text/plain"})
        assert resp.status_code == 404
        assert resp.text == "Not Found: no such thing"

    def test_browser_is_redirected(self, error_client):
        resp = error_client.get(
            "/login-required", headers={"Accept": "text/html"}, follow_redirects=False
        )
        assert resp.status_code == 307
        assert resp.headers["location"] == "http://localhost:3000/login"

    def test_api_client_gets_status(self, error_client):
        resp = error_client.get("/login-required")
        assert resp.status_code == 401
        assert resp.json()["instance"] == "http://localhost:3000/login"

    def test_html_without_redirect_is_text(self, error_client):
        resp = error_client.get("/missing", headers={"Accept": "text/html"})
        assert resp.status_code == 404
        assert resp.text.startswith("Not Found")

    def test_unexpected_error_is_500(self, error_client):
        resp = error_client.get("/crash")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "kaboom"
