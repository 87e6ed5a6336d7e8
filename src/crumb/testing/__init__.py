"""Test utilities for crumb applications.

Provides an in-process ASGI test client and Set-Cookie assertions::

    from crumb.testing import TestClient, assert_cookie_set
"""

from crumb.testing.assertions import (
    assert_cookie_deleted,
    assert_cookie_set,
    assert_no_cookies,
    set_cookie_lines,
)
from crumb.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_cookie_deleted",
    "assert_cookie_set",
    "assert_no_cookies",
    "set_cookie_lines",
]
