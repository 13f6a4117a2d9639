"""Tests for common utilities."""

import logging

from shortlink.common.validators import is_valid_url
from shortlink.common.headers import extract_forwarded_headers, build_base_url, resolve_path_prefix
from shortlink.common.url_builder import build_short_url, short_url_for_request
from shortlink.common.logging_config import RequestIdFilter, get_logger
from shortlink.common.request_context import get_request_id, request_id_var, set_request_id


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error.lower()

        valid, error = is_valid_url("https://exa mple.com")
        assert not valid

        valid, error = is_valid_url("http://[::1")
        assert not valid


class TestHeaders:
    """Test header utilities."""

    def test_extract_forwarded_headers(self):
        """Test forwarded header extraction."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "1.2.3.4",
            "X-Forwarded-Prefix": "/s",
        }

        result = extract_forwarded_headers(headers)
        assert result["forwarded_proto"] == "https"
        assert result["forwarded_host"] == "example.com"
        assert result["forwarded_for"] == "1.2.3.4"
        assert result["forwarded_prefix"] == "/s"

    def test_build_base_url_from_headers(self):
        """Test base URL building from headers."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
        }

        base_url = build_base_url(
            headers=headers,
            fallback_base_url="http://localhost:9200"
        )

        assert base_url == "https://example.com"

    def test_build_base_url_uses_first_proxy_hop(self):
        headers = {
            "x-forwarded-proto": "https, http",
            "x-forwarded-host": "short.link, internal:9200",
        }

        assert build_base_url(headers, "http://localhost:9200") == "https://short.link"

    def test_build_base_url_from_request(self):
        base_url = build_base_url(
            headers={},
            fallback_base_url="http://localhost:9200",
            request_scheme="http",
            request_host="testserver",
        )

        assert base_url == "http://testserver"

    def test_build_base_url_fallback(self):
        """Test base URL fallback."""
        base_url = build_base_url(
            headers={},
            fallback_base_url="http://localhost:9200/"
        )

        assert base_url == "http://localhost:9200"

    def test_resolve_path_prefix(self):
        assert resolve_path_prefix({}, "") == ""
        assert resolve_path_prefix({}, "s/") == "/s"
        assert resolve_path_prefix({"X-Forwarded-Prefix": "/u_s/"}, "/s") == "/u_s"


class TestURLBuilder:
    """Test short URL composition."""

    def test_build_short_url_no_prefix(self):
        assert build_short_url("abc123", "https://example.com") == "https://example.com/abc123"

    def test_build_short_url_normalizes_slashes(self):
        assert build_short_url("abc123", "https://example.com/", "/s/") == "https://example.com/s/abc123"

    def test_short_url_for_request_prefers_proxy(self):
        url = short_url_for_request(
            "abc123",
            headers={
                "X-Forwarded-Proto": "https",
                "X-Forwarded-Host": "short.link",
                "X-Forwarded-Prefix": "/go",
            },
            fallback_base_url="http://localhost:9200",
            configured_prefix="/s",
            request_scheme="http",
            request_host="internal:9200",
        )

        assert url == "https://short.link/go/abc123"

    def test_short_url_for_request_falls_back_to_config(self):
        url = short_url_for_request(
            "abc123",
            headers={},
            fallback_base_url="http://localhost:9200/",
            configured_prefix="s",
        )

        assert url == "http://localhost:9200/s/abc123"


class TestLogging:
    """Test logging helpers."""

    def test_request_id_filter(self):
        record = logging.LogRecord("shortlink", logging.INFO, __file__, 1, "msg", None, None)

        RequestIdFilter().filter(record)
        assert record.request_id == "-"

        token = request_id_var.set("req-42")
        try:
            RequestIdFilter().filter(record)
            assert record.request_id == "req-42"
        finally:
            request_id_var.reset(token)

    def test_get_logger_namespaces(self):
        assert get_logger().name == "shortlink"
        assert get_logger("web").name == "shortlink.web"
        assert get_logger("shortlink.service").name == "shortlink.service"

    def test_set_request_id_returns_reset_token(self):
        token = set_request_id("req-7")
        try:
            assert get_request_id() == "req-7"
        finally:
            request_id_var.reset(token)

        assert get_request_id() == ""
