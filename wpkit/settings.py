"""Persisted user settings (~/.config/wpkit/config.json).

Keys are stored camelCase; the CLI accepts kebab-case and converts.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

import config
from wpkit.utils import log, write_json_atomic

ARRAY_KEYS = ("publicPlugins",)
PATH_KEYS = ("defaultPluginsPath", "defaultThemesPath")
VALID_KEYS = (
    "defaultPluginsPath",
    "defaultThemesPath",
    "dbuser",
    "dbhost",
    "dbprefix",
    "adminUser",
    "adminEmail",
    "publicPlugins",
    "tld",
)


class SettingsError(Exception):
    pass


def _path(path: Path | None) -> Path:
    return Path(path) if path is not None else config.CONFIG_FILE


def to_setting_key(key: str) -> str:
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), key)


def split_values(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Read settings; missing file is empty, corrupt file raises SettingsError."""
    target = _path(path)
    if not target.exists():
        return {}
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        raise SettingsError(str(err)) from err
    if not isinstance(data, dict):
        raise SettingsError(f"{target} does not contain a JSON object")
    return data


def get_settings(path: Path | None = None) -> dict[str, Any]:
    try:
        return load_settings(path)
    except SettingsError as err:
        logging.error("Error reading config file: %s", err)
        return {}


def get_setting(key: str, path: Path | None = None) -> Any:
    return get_settings(path).get(key)


def save_settings(settings: dict[str, Any], path: Path | None = None) -> None:
    write_json_atomic(_path(path), settings)


def set_setting(key: str, value: str, path: Path | None = None) -> None:
    settings = get_settings(path)
    if key in ARRAY_KEYS:
        settings[key] = split_values(value)
    else:
        settings[key] = value
    save_settings(settings, path)
    log(f"PASS: set {key}")


def add_setting_values(key: str, value: str, path: Path | None = None) -> None:
    settings = get_settings(path)
    current = settings.get(key)
    if not isinstance(current, list):
        current = []
    for item in split_values(value):
        if item not in current:
            current.append(item)
    settings[key] = current
    save_settings(settings, path)


def remove_setting_values(key: str, value: str, path: Path | None = None) -> None:
    settings = get_settings(path)
    current = settings.get(key)
    if not isinstance(current, list):
        return
    drop = split_values(value)
    settings[key] = [item for item in current if item not in drop]
    save_settings(settings, path)


def ensure_default_settings(path: Path | None = None) -> None:
    settings = get_settings(path)
    if "publicPlugins" in settings:
        return
    settings["publicPlugins"] = []
    try:
        save_settings(settings, path)
    except OSError as err:
        logging.error("Error writing config file: %s", err)
