"""Tests for crumb.http.response — chainable Response and Redirect."""

import pytest

from crumb.http.response import Redirect, Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response("hello")
        assert r.status == 200
        assert r.content_type == "text/html; charset=utf-8"
        assert r.headers == ()

    def test_with_header_returns_new_response(self) -> None:
        original = Response("x")
        updated = original.with_header("X-Test", "1")
        assert original.headers == ()
        assert updated.headers == (("X-Test", "1"),)

    def test_with_headers(self) -> None:
        r = Response().with_headers({"A": "1", "B": "2"})
        assert r.headers == (("A", "1"), ("B", "2"))

    def test_with_status_and_content_type(self) -> None:
        r = Response().with_status(201).with_content_type("text/plain")
        assert r.status == 201
        assert r.content_type == "text/plain"

    def test_has_header_case_insensitive(self) -> None:
        r = Response().with_header("Set-Cookie", "manual=1")
        assert r.has_header("set-cookie")
        assert r.has_header("SET-COOKIE")
        assert not r.has_header("cookie")

    def test_header_values(self) -> None:
        r = Response().with_header("set-cookie", "a=1").with_header("Set-Cookie", "b=2")
        assert r.header_values("Set-Cookie") == ["a=1", "b=2"]

    def test_body_conversions(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"bytes").text == "bytes"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Response().status = 404  # type: ignore[misc]


class TestRedirect:
    def test_to_response(self) -> None:
        r = Redirect("/login").to_response()
        assert r.status == 302
        assert r.header_values("Location") == ["/login"]
        assert r.body == ""

    def test_extra_headers_kept(self) -> None:
        r = Redirect("/", status=303, headers=(("X-Reason", "logout"),)).to_response()
        assert r.status == 303
        assert r.headers == (("Location", "/"), ("X-Reason", "logout"))
