"""Tests for wp-config.php parsing."""

from __future__ import annotations

import pytest

from wpkit.wordpress.wp_config import parse_wp_config

WP_CONFIG = """<?php
define( 'DB_NAME', 'my_site' );
define('DB_USER', "root");
define( 'DB_PASSWORD', '' );
define( 'DB_HOST', 'localhost:/tmp/mysql.sock' );
$table_prefix = 'ms_';
"""


def test_parse_wp_config(tmp_path) -> None:
    path = tmp_path / "wp-config.php"
    path.write_text(WP_CONFIG, encoding="utf-8")

    assert parse_wp_config(path) == {
        "dbName": "my_site",
        "dbUser": "root",
        "dbHost": "localhost:/tmp/mysql.sock",
        "tablePrefix": "ms_",
    }


def test_parse_wp_config_defaults(tmp_path) -> None:
    path = tmp_path / "wp-config.php"
    path.write_text("<?php\ndefine('DB_NAME', 'only');\n", encoding="utf-8")

    parsed = parse_wp_config(path)

    assert parsed["dbName"] == "only"
    assert parsed["dbHost"] is None
    assert parsed["tablePrefix"] == "wp_"


def test_parse_wp_config_missing(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        parse_wp_config(tmp_path / "wp-config.php")
