"""Flat-file registry of scaffolded sites (~/.config/wpkit/sites.json).

The whole document is rewritten on every mutation.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import config
from wpkit.utils import log, write_json_atomic

RECORD_FIELDS = (
    "name",
    "path",
    "url",
    "created_at",
    "dbName",
    "dbUser",
    "dbHost",
    "adminUser",
    "adminEmail",
)


class RegistryError(Exception):
    pass


def sites_file_path() -> Path:
    return config.SITES_FILE


def _write(sites: list[dict[str, Any]]) -> None:
    write_json_atomic(sites_file_path(), {"sites": sites})


def _load() -> list[dict[str, Any]]:
    path = sites_file_path()
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        raise RegistryError(f"Could not read {path}: {err}") from err
    if not isinstance(data, dict):
        raise RegistryError(f"{path} does not contain a JSON object")
    sites = data.get("sites") or []
    return [s for s in sites if isinstance(s, dict)]


def list_sites() -> list[dict[str, Any]]:
    try:
        return _load()
    except RegistryError as err:
        logging.error("%s", err)
        return []


def get_site(name: str) -> dict[str, Any] | None:
    for site in list_sites():
        if site.get("name") == name:
            return site
    return None


def site_exists(name: str) -> bool:
    return get_site(name) is not None


def add_site(record: dict[str, Any]) -> None:
    """Insert or replace record by name.

    Raises RegistryError rather than overwrite an unreadable registry.
    """
    sites = [s for s in _load() if s.get("name") != record["name"]]
    entry = {field: record.get(field) for field in RECORD_FIELDS}
    if not entry["created_at"]:
        entry["created_at"] = datetime.now(timezone.utc).isoformat()
    sites.append(entry)
    _write(sites)
    log(f"PASS: registered site {record['name']}")


def remove_site(name: str) -> bool:
    sites = _load()
    kept = [s for s in sites if s.get("name") != name]
    if len(kept) == len(sites):
        return False
    _write(kept)
    log(f"PASS: unregistered site {name}")
    return True
