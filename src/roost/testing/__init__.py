"""Test utilities for roost routers.

Provides an in-process test client and response assertions::

    from roost.testing import TestClient, assert_redirect
"""

from roost.testing.assertions import assert_json, assert_redirect, assert_status, assert_text
from roost.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_json",
    "assert_redirect",
    "assert_status",
    "assert_text",
]
