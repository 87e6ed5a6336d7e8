"""Tests for crumb.server.sender — response emission and the cookie merge policy."""

from datetime import UTC, datetime

import pytest

from crumb.errors import InvalidStateError
from crumb.http.jar import CookieJar
from crumb.http.response import Response
from crumb.server.sender import cookie_header_values, send_response


def _recorder() -> tuple[list[dict], object]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    return messages, send


def _set_cookies(message: dict) -> list[bytes]:
    return [value for name, value in message["headers"] if name == b"set-cookie"]


def _jar(header: str = "") -> CookieJar:
    return CookieJar(header, clock=lambda: datetime(2026, 1, 1, tzinfo=UTC))


class TestSendResponseNoBodyStatuses:
    @pytest.mark.asyncio
    async def test_204_drops_body_and_sets_zero_content_length(self) -> None:
        messages, send = _recorder()

        # Even if a handler accidentally attaches body content, sender must
        # enforce RFC no-body semantics for 204.
        response = Response("unexpected-body").with_status(204)
        await send_response(response, send)

        assert messages[0]["type"] == "http.response.start"
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"

        assert messages[1]["type"] == "http.response.body"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_200_preserves_body(self) -> None:
        messages, send = _recorder()

        await send_response(Response("ok"), send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert messages[1]["body"] == b"ok"


class TestSendResponseCookies:
    @pytest.mark.asyncio
    async def test_no_jar_no_cookies(self) -> None:
        messages, send = _recorder()

        await send_response(Response("ok"), send)

        assert _set_cookies(messages[0]) == []

    @pytest.mark.asyncio
    async def test_each_jar_line_is_its_own_header(self) -> None:
        messages, send = _recorder()
        jar = _jar()
        jar.set("a", "1")
        jar.delete("b")

        await send_response(Response("ok"), send, cookies=jar)

        assert _set_cookies(messages[0]) == [
            b"a=1",
            b"b=; Expires=Thu, 01 Jan 1970 00:00:00 GMT",
        ]

    @pytest.mark.asyncio
    async def test_untouched_request_cookies_not_sent(self) -> None:
        messages, send = _recorder()
        jar = _jar("session=abc; theme=dark")
        assert jar.has("session")

        await send_response(Response("ok"), send, cookies=jar)

        assert _set_cookies(messages[0]) == []

    @pytest.mark.asyncio
    async def test_manual_set_cookie_discards_jar(self) -> None:
        messages, send = _recorder()
        jar = _jar()
        jar.set("from_jar", "1")

        response = Response("ok").with_header("Set-Cookie", "manual=1")
        await send_response(response, send, cookies=jar)

        assert _set_cookies(messages[0]) == [b"manual=1"]

    @pytest.mark.asyncio
    async def test_manual_header_match_is_case_insensitive(self) -> None:
        messages, send = _recorder()
        jar = _jar()
        jar.set("from_jar", "1")

        response = Response("ok").with_header("SET-COOKIE", "manual=1")
        await send_response(response, send, cookies=jar)

        assert _set_cookies(messages[0]) == [b"manual=1"]

    @pytest.mark.asyncio
    async def test_jar_sealed_after_send(self) -> None:
        _, send = _recorder()
        jar = _jar()

        await send_response(Response("ok"), send, cookies=jar)

        assert jar.sealed
        with pytest.raises(InvalidStateError):
            jar.set("late", "1")

    @pytest.mark.asyncio
    async def test_jar_sealed_even_when_discarded(self) -> None:
        _, send = _recorder()
        jar = _jar()
        jar.set("a", "1")

        await send_response(Response().with_header("Set-Cookie", "m=1"), send, cookies=jar)

        assert jar.sealed


class TestCookieHeaderValues:
    def test_none_jar(self) -> None:
        assert cookie_header_values(Response(), None) == []

    def test_jar_lines_without_manual_header(self) -> None:
        jar = _jar()
        jar.set("a", "1", path="/")
        assert cookie_header_values(Response(), jar) == ["a=1; Path=/"]

    def test_manual_header_wins(self) -> None:
        jar = _jar()
        jar.set("a", "1")
        response = Response().with_header("Set-Cookie", "b=2")
        assert cookie_header_values(response, jar) == []
