"""Tests for URL validation and domain derivation."""

import pytest

from link2json.errors import InvalidURLError, URLRequiredError
from link2json.services.urls import base_domain, resolve_against_domain, validate_url


@pytest.mark.parametrize("url", [None, ""])
def test_validate_url_required(url) -> None:
    with pytest.raises(URLRequiredError):
        validate_url(url)


@pytest.mark.parametrize(
    "url",
    ["not-a-url", "example.com/page", "/relative/path", "ftp://example.com/file", "http://"],
)
def test_validate_url_rejects(url: str) -> None:
    with pytest.raises(InvalidURLError):
        validate_url(url)


def test_validate_url_returns_input_unchanged() -> None:
    url = "https://Example.com/a?b=1"
    assert validate_url(url) == url


def test_validate_url_accepts_long_urls() -> None:
    url = "https://example.com/search?q=" + "a" * 5000
    assert validate_url(url) == url


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://example.com/a/b?c=d", "https://example.com"),
        ("http://example.com:8080/", "http://example.com:8080"),
        ("https://user:pw@example.com/x", "https://example.com"),
        ("not-a-url", ""),
        ("http://[::1", ""),
    ],
)
def test_base_domain(url: str, expected: str) -> None:
    assert base_domain(url) == expected


def test_resolve_against_domain() -> None:
    assert resolve_against_domain("https://example.com", "/favicon.ico") == "https://example.com/favicon.ico"
    assert resolve_against_domain("https://example.com", "img/icon.png") == "https://example.com/img/icon.png"
    assert resolve_against_domain("https://example.com", "//cdn.net/i.ico") == "https://cdn.net/i.ico"
    assert resolve_against_domain("", "/favicon.ico") == "/favicon.ico"
