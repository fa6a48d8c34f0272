"""Inspect and remove registered sites."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

import config
from wpkit import registry
from wpkit.textparse import PHP_VERSION_RE, count_lines, parse_version, split_lines
from wpkit.utils import error_text, log, run_capture, status_fail, status_pass
from .cli import wp_json, wp_output, wp_run
from .wp_config import parse_wp_config

UNKNOWN = "Unknown"


def get_directory_size(path: str | Path, runner=run_capture) -> str:
    try:
        proc = runner(["du", "-sh", str(path)])
    except (subprocess.CalledProcessError, OSError) as err:
        log(f"SKIP: du -sh {path}: {err}")
        return UNKNOWN
    return (proc.stdout or "").split("\t")[0].strip() or UNKNOWN


def get_wordpress_version(path: str | Path) -> str:
    return wp_output(path, ["core", "version"]) or UNKNOWN


def get_active_plugins(path: str | Path) -> list[str]:
    out = wp_output(path, ["plugin", "list", "--status=active", "--field=name"])
    return split_lines(out or "")


def get_active_theme(path: str | Path) -> str:
    return wp_output(path, ["theme", "list", "--status=active", "--field=name"]) or UNKNOWN


def get_database_info(path: str | Path) -> dict[str, Any]:
    tables = wp_output(path, ["db", "query", "SHOW TABLES", "--skip-column-names"])
    size = wp_output(path, ["db", "size", "--human-readable"])
    if tables is None or size is None:
        return {"tableCount": 0, "size": UNKNOWN}
    return {"tableCount": count_lines(tables), "size": size}


def get_php_version(path: str | Path, runner=run_capture) -> str:
    info = wp_json(path, ["cli", "info", "--format=json"])
    if isinstance(info, dict) and info.get("php_version"):
        return str(info["php_version"])
    try:
        proc = runner([config.PHP_BIN, "--version"])
    except (subprocess.CalledProcessError, OSError):
        return UNKNOWN
    return parse_version(proc.stdout or "", PHP_VERSION_RE) or UNKNOWN


def get_wp_config_info(path: str | Path) -> dict[str, str | None]:
    try:
        return parse_wp_config(Path(path) / "wp-config.php")
    except (FileNotFoundError, OSError) as err:
        log(f"SKIP: {err}")
        return {}


def get_basic_site_info(name: str, runner=run_capture) -> dict[str, Any] | None:
    site = registry.get_site(name)
    if site is None:
        return None
    exists = Path(site["path"]).exists()
    size = get_directory_size(site["path"], runner) if exists else "N/A"
    return {**site, "exists": exists, "directorySize": size}


def get_full_site_info(name: str, runner=run_capture) -> dict[str, Any] | None:
    site = registry.get_site(name)
    if site is None:
        return None
    path = site["path"]
    if not Path(path).exists():
        return {**site, "exists": False}
    return {
        **site,
        "exists": True,
        "directorySize": get_directory_size(path, runner),
        "wpVersion": get_wordpress_version(path),
        "plugins": get_active_plugins(path),
        "theme": get_active_theme(path),
        "dbInfo": get_database_info(path),
        "phpVersion": get_php_version(path, runner),
        "wpConfig": get_wp_config_info(path),
    }


def _is_safe_site_dir(path: Path, name: str) -> bool:
    try:
        resolved = path.resolve()
    except OSError:
        return False
    return resolved.name == name and resolved != Path(resolved.anchor)


def drop_database(site: dict[str, Any]) -> bool:
    path = Path(site["path"])
    if not (path / "wp-config.php").exists():
        logging.error("No wp-config.php in %s; cannot drop database", path)
        return False
    ok, _, _, _ = wp_run(path, ["db", "drop", "--yes"])
    return ok


def remove_site_dir(site: dict[str, Any], runner=run_capture) -> bool:
    path = Path(site["path"])
    if not path.exists():
        return True
    if not _is_safe_site_dir(path, site["name"]):
        logging.error("Refusing to remove unsafe path %s", path)
        return False
    try:
        runner(["rm", "-rf", str(path)])
    except (subprocess.CalledProcessError, OSError) as err:
        logging.error("Could not remove %s: %s", path, error_text(err))
        return False
    log(f"PASS: Removed site directory {path}")
    return True


def delete_site(name: str, keep_db: bool = False, keep_files: bool = False, runner=run_capture) -> bool:
    site = registry.get_site(name)
    if site is None:
        status_fail(f"site {name} is not registered")
        return False
    # The database goes first: dropping it needs wp-config.php on disk.
    if not keep_db:
        if not drop_database(site):
            status_fail(f"database drop for {name}; see log")
            return False
        status_pass("database drop")
    if not keep_files:
        if not remove_site_dir(site, runner):
            status_fail(f"could not remove {site['path']}")
            return False
        status_pass("site dir remove")
    try:
        registry.remove_site(name)
    except (registry.RegistryError, OSError) as err:
        logging.error("Could not unregister %s: %s", name, err)
        status_fail(f"site registry for {name}; see log")
        return False
    status_pass(f"site {name} deleted")
    return True
