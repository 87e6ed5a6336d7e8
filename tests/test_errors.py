"""Tests for crumb.errors — exception hierarchy and error messages."""

import pytest

from crumb.errors import (
    ConfigurationError,
    CrumbError,
    HTTPError,
    InvalidStateError,
    NotFound,
    ParseError,
)


class TestHierarchy:
    def test_http_error_is_crumb_error(self) -> None:
        assert issubclass(HTTPError, CrumbError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)

    def test_configuration_error_is_crumb_error(self) -> None:
        assert issubclass(ConfigurationError, CrumbError)

    def test_parse_error_is_value_error(self) -> None:
        assert issubclass(ParseError, CrumbError)
        assert issubclass(ParseError, ValueError)

    def test_invalid_state_error_is_runtime_error(self) -> None:
        assert issubclass(InvalidStateError, CrumbError)
        assert issubclass(InvalidStateError, RuntimeError)


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        err = HTTPError(status=400, detail="Bad cookie")
        assert str(err) == "400: Bad cookie"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_not_found_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"

    def test_raisable(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            raise NotFound("no such page")
        assert exc_info.value.detail == "no such page"
