"""
Tests for boundary URL validation.
"""

import pytest

from websift.security.validation import (
    URLValidationError,
    URLValidationRules,
    URLValidator,
    describe_url,
    validate_url,
)


@pytest.mark.unit
class TestValidateUrl:
    def test_accepts_http_and_https(self):
        assert validate_url("https://example.com/path") == "https://example.com/path"
        assert validate_url("  http://example.com  ") == "http://example.com"

    @pytest.mark.parametrize("url", ["not-a-url", "example.com/page", "ftp://example.com/", "https://", "http://host:99999/"])
    def test_rejects(self, url):
        with pytest.raises(URLValidationError):
            validate_url(url)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_url("nope")

    def test_blocked_hosts(self):
        validator = URLValidator(URLValidationRules(blocked_hosts=["internal.example"]))
        with pytest.raises(URLValidationError):
            validator.validate_url("https://api.internal.example/")

    def test_max_length(self):
        validator = URLValidator(URLValidationRules(max_url_length=20))
        with pytest.raises(URLValidationError):
            validator.validate_url("https://example.com/" + "a" * 50)


@pytest.mark.unit
class TestDescribeUrl:
    def test_parts(self):
        assert describe_url("https://Example.com/docs/page?x=1") == {
            "protocol": "https:",
            "hostname": "example.com",
            "pathname": "/docs/page",
        }

    def test_empty_path(self):
        assert describe_url("http://example.com")["pathname"] == "/"

    def test_any_scheme_with_host(self):
        assert describe_url("ftp://files.example/pub")["protocol"] == "ftp:"

    def test_invalid(self):
        with pytest.raises(URLValidationError):
            describe_url("definitely not a url")
