# cli.py
# Invariants:
# - All WP-CLI access goes through these wrappers; callers pass subcommand
#   parts only (no leading "wp", no php/phar prefix).
# - Every call runs as `php <phar> ...` with cwd = site directory and --quiet.
# - Logs: one PASS/FAIL per call; console stays minimal; file logs keep details.
# - Read helpers (wp_output, wp_json) return None on failure instead of raising.

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Sequence, Tuple

import requests

import config
from wpkit.textparse import parse_json_loose
from wpkit.utils import drop_noise_lines, log, run_capture

DOWNLOAD_TIMEOUT = 60  # seconds

os.environ.setdefault("WP_CLI_DISABLE_AUTO_CHECK_UPDATE", "1")


class WpCliError(Exception):
    pass


def wp_cli_command() -> list[str]:
    return [config.PHP_BIN, str(config.WP_CLI_PATH)]


def download_wp_cli(dest: Path | None = None, url: str = config.WP_CLI_URL) -> Path:
    """Fetch wp-cli.phar to dest (atomic rename, mode 755)."""
    target = Path(dest) if dest is not None else config.WP_CLI_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        resp = requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT)
    except requests.RequestException as err:
        raise WpCliError(f"Failed to download WP-CLI: {err}") from err
    with resp:
        if resp.status_code != 200:
            raise WpCliError(f"Failed to download WP-CLI: HTTP {resp.status_code}")
        with tempfile.NamedTemporaryFile(delete=False, dir=str(target.parent)) as tmp:
            try:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        tmp.write(chunk)
            except requests.RequestException as err:
                tmp.close()
                os.unlink(tmp.name)
                raise WpCliError(f"Failed to download WP-CLI: {err}") from err
            tmp_path = tmp.name
    os.chmod(tmp_path, 0o755)
    os.replace(tmp_path, str(target))
    log(f"PASS: downloaded WP-CLI to {target}")
    return target


def ensure_wp_cli(runner=run_capture) -> list[str]:
    """Make sure the phar exists and PHP runs; return the command prefix."""
    if not config.WP_CLI_PATH.exists():
        download_wp_cli()
    try:
        runner([config.PHP_BIN, "--version"])
    except (subprocess.CalledProcessError, OSError) as err:
        raise WpCliError(
            "PHP is not installed or not in PATH. WordPress and WP-CLI require PHP to run."
        ) from err
    return wp_cli_command()


def _normalize_parts(command: str | Sequence[str]) -> list[str]:
    if isinstance(command, str):
        return shlex.split(command)
    return [str(p) for p in command]


def _ensure_quiet(parts: list[str]) -> list[str]:
    if "--quiet" not in parts:
        parts.append("--quiet")
    return parts


def _fmt_cmd_for_log(parts: list[str]) -> str:
    return " ".join(["wp"] + parts)


def wp_run(
    site_path: str | Path, command: str | Sequence[str], timeout: int = config.WP_TIMEOUT
) -> Tuple[bool, str, str, int]:
    parts = _ensure_quiet(_normalize_parts(command))
    args = wp_cli_command() + parts

    t0 = time.monotonic()
    try:
        proc = subprocess.run(
            args,
            cwd=str(site_path),
            text=True,
            capture_output=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.TimeoutExpired:
        dt = time.monotonic() - t0
        logging.error("%s timeout after %.1fs", _fmt_cmd_for_log(parts), dt)
        return False, "", f"timeout after {dt:.1f}s", 124
    except OSError as err:
        logging.error("%s could not start: %s", _fmt_cmd_for_log(parts), err)
        return False, "", str(err), 127

    dt = time.monotonic() - t0
    ok = proc.returncode == 0
    if ok:
        log(f"PASS: {_fmt_cmd_for_log(parts)} ({dt:.1f}s)")
    else:
        logging.error(
            "%s exit=%s\nSTDERR: %s",
            _fmt_cmd_for_log(parts),
            proc.returncode,
            "\n".join(drop_noise_lines(proc.stderr or "")),
        )
    return ok, (proc.stdout or ""), (proc.stderr or ""), proc.returncode


def wp_cmd(site_path: str | Path, command, timeout: int = config.WP_TIMEOUT) -> bool:
    ok, _, _, _ = wp_run(site_path, command, timeout=timeout)
    return ok


def wp_output(site_path: str | Path, command, timeout: int = config.WP_TIMEOUT) -> str | None:
    ok, out, _, _ = wp_run(site_path, command, timeout=timeout)
    if not ok:
        return None
    return out.strip()


def wp_json(site_path: str | Path, command, timeout: int = config.WP_TIMEOUT) -> Any | None:
    out = wp_output(site_path, command, timeout=timeout)
    if out is None:
        return None
    data = parse_json_loose("\n".join(drop_noise_lines(out)))
    if data is None:
        logging.warning("%s: no JSON in output", _fmt_cmd_for_log(_normalize_parts(command)))
    return data
