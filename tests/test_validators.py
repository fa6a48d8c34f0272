"""Tests for option validators."""

from __future__ import annotations

import pytest

from wpkit.validators import is_valid_db_name, is_valid_email, normalize_db_prefix, normalize_url


@pytest.mark.parametrize(
    "email, expected",
    [
        ("admin@test.com", True),
        ("a.b@sub.example.org", True),
        ("admin@test", False),
        ("no spaces@test.com", False),
        ("", False),
    ],
)
def test_is_valid_email(email, expected) -> None:
    assert is_valid_email(email) is expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("my-site", "my-site.test"),
        ("my-site.test", "my-site.test"),
        ("https://my-site.test/", "my-site.test"),
        ("http://shop.local//", "shop.local.test"),
    ],
)
def test_normalize_url(url, expected) -> None:
    assert normalize_url(url) == expected


@pytest.mark.parametrize("url", ["-bad", "under_score", "two..dots", "bad-.test"])
def test_normalize_url_rejects(url) -> None:
    with pytest.raises(ValueError, match="Invalid URL format"):
        normalize_url(url)


def test_normalize_url_custom_tld() -> None:
    assert normalize_url("blog", tld=".local") == "blog.local"


@pytest.mark.parametrize(
    "prefix, expected",
    [("wp", "wp_"), ("wp_", "wp_"), ("site__", "site_"), ("my_site", "my_site_")],
)
def test_normalize_db_prefix(prefix, expected) -> None:
    assert normalize_db_prefix(prefix) == expected


@pytest.mark.parametrize("prefix", ["wp-", "___", "", "w p"])
def test_normalize_db_prefix_rejects(prefix) -> None:
    with pytest.raises(ValueError):
        normalize_db_prefix(prefix)


def test_is_valid_db_name() -> None:
    assert is_valid_db_name("my_site")
    assert is_valid_db_name("a" * 64)
    assert not is_valid_db_name("a" * 65)
    assert not is_valid_db_name("my-site")
    assert not is_valid_db_name("")
