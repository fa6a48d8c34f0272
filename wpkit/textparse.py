"""Helpers for pulling facts out of tool output.

Single-responsibility: text processing only. Callers run commands.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional

# Major.minor.patch; anything after the patch digits (-dev, -RC1-1234,
# +build, pl2) is ignored.
_SEMVER = r"(\d+\.\d+\.\d+)"
WP_CLI_VERSION_RE = re.compile(r"WP-CLI " + _SEMVER)
PHP_VERSION_RE = re.compile(r"PHP " + _SEMVER)


def parse_version(text: str, pattern: re.Pattern = PHP_VERSION_RE) -> Optional[str]:
    """Return the first dotted version triple matched by pattern, or None."""
    if not text:
        return None
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1)


def version_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


def is_below(version: str, minimum: tuple[int, int]) -> bool:
    major, minor = version_tuple(version)[:2]
    return (major, minor) < tuple(minimum)


def missing_extensions(listing: str, required: Iterable[str]) -> list[str]:
    """Return the required names absent from a `php -m` style listing.

    Matching is a case-insensitive substring test against the whole
    listing, so headers like "[PHP Modules]" are harmless.
    """
    haystack = (listing or "").lower()
    return [name for name in required if name.lower() not in haystack]


def count_lines(text: str) -> int:
    """Number of non-blank lines, e.g. rows from `SHOW TABLES`."""
    return len([ln for ln in (text or "").splitlines() if ln.strip()])


def split_lines(text: str) -> list[str]:
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def extract_json_blob(s: str) -> Optional[str]:
    """Return the first balanced JSON object/array found in text.

    Scans for the earliest '[' or '{' and returns the substring spanning
    the matching bracket/brace, tolerating strings and escapes.
    Returns None if no balanced JSON is found.
    """
    if not s:
        return None
    starts = [i for i in (s.find("["), s.find("{")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    open_c = s[start]
    close_c = "]" if open_c == "[" else "}"

    depth = 0
    in_str = False
    esc = False
    for i in range(start, len(s)):
        ch = s[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == open_c:
            depth += 1
        elif ch == close_c:
            depth -= 1
            if depth == 0:
                return s[start : i + 1]
    return None


def parse_json_loose(text: str) -> Any | None:
    """Parse JSON embedded in noisy output; None when nothing usable."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass
    blob = extract_json_blob(text)
    if blob is None:
        return None
    try:
        return json.loads(blob)
    except ValueError:
        return None
