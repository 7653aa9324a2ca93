"""Tests for roost.config."""

import dataclasses

import pytest

from roost.config import RouterConfig


class TestRouterConfig:
    def test_defaults(self) -> None:
        config = RouterConfig()
        assert config.base_path == "/"
        assert config.custom_response_builder is None
        assert config.raise_on_no_route is False
        assert config.not_found_body == "Not Found"
        assert config.error_body == "Internal Server Error"
        assert config.middleware_timeout is None

    def test_frozen(self) -> None:
        config = RouterConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.base_path = "/v1"  # type: ignore[misc]

    def test_replace(self) -> None:
        config = dataclasses.replace(RouterConfig(), raise_on_no_route=True)
        assert config.raise_on_no_route is True
        assert config.base_path == "/"
