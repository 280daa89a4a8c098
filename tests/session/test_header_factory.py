"""Tests for apirepo.session.header_factory module."""

import pytest
from pydantic import SecretStr

from apirepo.session import HeaderFactory


class TestHeaderFactory:
    """Test suite for HeaderFactory."""

    def test_bearer(self):
        headers = HeaderFactory.get_header(auth_type="bearer", api_key="k")

        assert headers == {
            "Content-Type": "application/json",
            "Authorization": "Bearer k",
        }

    def test_x_api_key(self):
        headers = HeaderFactory.get_header(auth_type="x-api-key", api_key="k")

        assert headers["x-api-key"] == "k"
        assert "Authorization" not in headers

    def test_secret_str_is_unwrapped(self):
        headers = HeaderFactory.get_header(api_key=SecretStr("hidden"))

        assert headers["Authorization"] == "Bearer hidden"

    def test_none_auth_needs_no_key(self):
        headers = HeaderFactory.get_header(auth_type="none")

        assert headers == {"Content-Type": "application/json"}

    def test_missing_key_raises(self):
        with pytest.raises(ValueError, match="API key"):
            HeaderFactory.get_header(auth_type="bearer")

    def test_unsupported_auth_type(self):
        with pytest.raises(ValueError, match="Unsupported"):
            HeaderFactory.get_header(auth_type="basic", api_key="k")

    def test_default_headers_merge_last(self):
        headers = HeaderFactory.get_header(
            api_key="k",
            content_type=None,
            default_headers={"User-Agent": "apirepo"},
        )

        assert headers == {"Authorization": "Bearer k", "User-Agent": "apirepo"}
