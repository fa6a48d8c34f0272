"""Laravel Herd helpers (optional local HTTPS proxy)."""

from __future__ import annotations

import subprocess
from typing import Callable

import config
from wpkit.utils import log, run_capture

Runner = Callable[..., subprocess.CompletedProcess]


def is_herd_installed(runner: Runner = run_capture) -> bool:
    try:
        runner([config.HERD_BIN, "--version"])
        return True
    except (subprocess.CalledProcessError, OSError):
        return False


def herd_version(runner: Runner = run_capture) -> str:
    proc = runner([config.HERD_BIN, "--version"])
    return (proc.stdout or "").strip()


def herd_link(cwd: str, runner: Runner = run_capture) -> None:
    runner([config.HERD_BIN, "link"], cwd=cwd)
    log(f"PASS: herd link in {cwd}")


def herd_secure(cwd: str, runner: Runner = run_capture) -> None:
    runner([config.HERD_BIN, "secure"], cwd=cwd)
    log(f"PASS: herd secure in {cwd}")
