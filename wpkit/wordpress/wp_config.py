"""Read database settings out of a wp-config.php file."""

from __future__ import annotations

import re
from pathlib import Path


def _define_re(name: str) -> re.Pattern:
    return re.compile(
        r"define\s*\(\s*['\"]" + name + r"['\"]\s*,\s*['\"]([^'\"]+)['\"]\s*\)"
    )


DB_NAME_RE = _define_re("DB_NAME")
DB_USER_RE = _define_re("DB_USER")
DB_HOST_RE = _define_re("DB_HOST")
TABLE_PREFIX_RE = re.compile(r"\$table_prefix\s*=\s*['\"]([^'\"]+)['\"]")


def _first(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def parse_wp_config(path: str | Path) -> dict[str, str | None]:
    """Return dbName, dbUser, dbHost and tablePrefix (default "wp_").

    Raises FileNotFoundError when the file does not exist.
    """
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"wp-config.php not found: {target}")
    content = target.read_text(encoding="utf-8", errors="replace")
    return {
        "dbName": _first(DB_NAME_RE, content),
        "dbUser": _first(DB_USER_RE, content),
        "dbHost": _first(DB_HOST_RE, content),
        "tablePrefix": _first(TABLE_PREFIX_RE, content) or "wp_",
    }
