"""Input validation for site scaffolding options."""

from __future__ import annotations

import re

import config

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
HOSTNAME_RE = re.compile(
    r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)*$", re.IGNORECASE
)
PREFIX_RE = re.compile(r"^[a-zA-Z0-9_]+$")
DB_NAME_RE = re.compile(r"^[a-zA-Z0-9_]{1,64}$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def normalize_url(url: str, tld: str = config.DEFAULT_TLD) -> str:
    """Strip scheme and trailing slashes, ensure the local TLD suffix."""
    normalized = re.sub(r"^https?://", "", url or "")
    normalized = normalized.rstrip("/")
    if not normalized.endswith(tld):
        normalized = f"{normalized}{tld}"
    if not HOSTNAME_RE.match(normalized):
        raise ValueError(f"Invalid URL format: {url}")
    return normalized


def normalize_db_prefix(prefix: str) -> str:
    normalized = (prefix or "").rstrip("_")
    if not PREFIX_RE.match(normalized):
        raise ValueError(
            f"Invalid database prefix format: {prefix}. "
            "Only alphanumeric and underscores allowed."
        )
    return f"{normalized}_"


def is_valid_db_name(db_name: str) -> bool:
    return bool(DB_NAME_RE.match(db_name or ""))
