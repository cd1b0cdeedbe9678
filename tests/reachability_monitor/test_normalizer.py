"""
Unit tests for the URL normalizer.

The tests follow the Arrange-Act-Assert (AAA) pattern.
"""

import pytest

from reachability_monitor.errors import InvalidInputError
from reachability_monitor.normalizer import normalize_url


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("example.com", "https://example.com/"),
        ("  example.com  ", "https://example.com/"),
        ("www.example.com/path", "https://www.example.com/path"),
        ("example.com?q=1", "https://example.com/?q=1"),
        ("https://example.com/path/", "https://example.com/path/"),
        ("http://example.com", "http://example.com/"),
    ],
)
def test_normalize_url_should_return_absolute_url(raw: str, expected: str) -> None:
    """
    Tests that scheme-less input gets https:// and an empty path becomes "/".
    """
    # Act
    result = normalize_url(raw)

    # Assert
    assert result == expected


def test_normalize_url_should_keep_scheme_regardless_of_case() -> None:
    """
    Tests that an upper-case scheme is recognized and not prefixed again.
    """
    # Act
    result = normalize_url("HTTP://Example.COM/Path")

    # Assert
    assert result == "http://example.com/Path"


def test_normalize_url_should_percent_encode_path() -> None:
    """
    Tests that characters not allowed in a path are percent-encoded.
    """
    # Act
    result = normalize_url("example.com/a b")

    # Assert
    assert result == "https://example.com/a%20b"


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_normalize_url_should_reject_empty_input(raw: str) -> None:
    """
    Tests that empty and whitespace-only input is rejected.
    """
    # Act & Assert
    with pytest.raises(InvalidInputError):
        normalize_url(raw)


@pytest.mark.parametrize(
    "raw",
    [
        "https://",
        "http://[::1",
        "https://exa mple.com",
        "a<b.com",
        "a|b.com",
        "a^b.com",
        "exa%20mple.com",
        "exa%00mple.com",
        "https://exa\x01mple.com/",
    ],
)
def test_normalize_url_should_reject_unparseable_input(raw: str) -> None:
    """
    Tests that input without a usable host is rejected.
    """
    # Act & Assert
    with pytest.raises(InvalidInputError):
        normalize_url(raw)


def test_normalize_url_should_be_idempotent() -> None:
    """
    Tests that normalizing an already normalized URL does not change it.
    """
    # Arrange
    normalized = normalize_url("Example.com/some path?x=1")

    # Act & Assert
    assert normalize_url(normalized) == normalized


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://127.0.0.1:8080/status", "http://127.0.0.1:8080/status"),
        ("http://[::1]:8080", "http://[::1]:8080/"),
        ("user@example.com", "https://user@example.com/"),
    ],
)
def test_normalize_url_should_accept_ip_literals_and_userinfo(raw: str, expected: str) -> None:
    """
    Tests that IP literals and credentials do not trip the host character check.
    """
    # Act & Assert
    assert normalize_url(raw) == expected
