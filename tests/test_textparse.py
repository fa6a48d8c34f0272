"""Tests for tool-output parsing helpers."""

from __future__ import annotations

import pytest

from wpkit.textparse import (
    WP_CLI_VERSION_RE,
    count_lines,
    extract_json_blob,
    is_below,
    missing_extensions,
    parse_json_loose,
    parse_version,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("PHP 8.2.15 (cli) (built: Jan 16 2024 12:19:32) (NTS)", "8.2.15"),
        ("PHP 8.4.0-dev (cli)", "8.4.0"),
        ("PHP 8.3.0RC6-1+ubuntu22.04.1 (cli)", "8.3.0"),
        ("Zend Engine v4.2.15", None),
        ("", None),
    ],
)
def test_parse_php_version(text, expected) -> None:
    assert parse_version(text) == expected


def test_parse_wp_cli_version() -> None:
    assert parse_version("WP-CLI 2.10.0\nPHP 8.2.0", WP_CLI_VERSION_RE) == "2.10.0"


def test_is_below_compares_major_minor_only() -> None:
    assert is_below("7.3.99", (7, 4)) is True
    assert is_below("7.4.0", (7, 4)) is False
    assert is_below("10.0.1", (7, 4)) is False
    assert is_below("5.6.40", (7, 4)) is True


def test_missing_extensions_keeps_required_order() -> None:
    listing = "[PHP Modules]\nCore\ncurl\njson\n\n[Zend Modules]\n"
    assert missing_extensions(listing, ("mysqli", "curl", "json", "mbstring")) == ["mysqli", "mbstring"]


def test_missing_extensions_empty_listing() -> None:
    assert missing_extensions("", ("curl",)) == ["curl"]


def test_count_lines_ignores_blanks() -> None:
    assert count_lines("wp_posts\nwp_users\n\n  \nwp_options\n") == 3
    assert count_lines("") == 0


def test_extract_json_blob_from_noise() -> None:
    text = 'PHP Warning: foo in bar\n{"php_version": "8.2.0", "note": "a } brace"}\ntrailing'
    assert extract_json_blob(text) == '{"php_version": "8.2.0", "note": "a } brace"}'


def test_extract_json_blob_unbalanced() -> None:
    assert extract_json_blob('[{"a": 1}') is None
    assert extract_json_blob("plain text") is None


def test_parse_json_loose() -> None:
    assert parse_json_loose('{"a": 1}') == {"a": 1}
    assert parse_json_loose('Deprecated: x\n[1, 2]') == [1, 2]
    assert parse_json_loose("nope") is None
