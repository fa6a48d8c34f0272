"""Utility helpers shared by the wpkit modules.

- init_logging: configure console + file logging with run-id.
- status_pass/status_warn/status_fail: concise console status lines (with run-id).
- run_capture: subprocess.run with check + captured text output; the default process runner.
- log: debug-level logger for normal status lines (file-oriented).
- db_ident: normalized identifier for DB names.
- strip_ansi / drop_noise_lines: scrub tool output before logging or parsing.
- write_json_atomic: rewrite a JSON document via temp file + replace.
"""

import json
import logging
import os
import re
import subprocess
import tempfile
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Sequence

import config


_RUN_ID = ""


def _gen_run_id() -> str:
    return uuid.uuid4().hex[:8]


def init_logging(run_id: str | None = None) -> str:
    """Initialize logging with console + rotating file handlers.

    - Console: CRITICAL only; terse status goes through status_* helpers.
    - File: DEBUG+, rich format, written to <config dir>/log/wpkit-<rid>.log
    Returns the run-id used.
    """
    global _RUN_ID
    if _RUN_ID:
        return _RUN_ID

    rid = run_id or os.environ.get("WPKIT_RID") or _gen_run_id()
    _RUN_ID = rid

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    try:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        logfile = os.path.join(config.LOG_DIR, f"wpkit-{rid}.log")
    except OSError:
        logfile = os.path.abspath(f"wpkit-{rid}.log")

    # Quiet any pre-existing console handlers
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(logging.CRITICAL)

    has_file = any(
        isinstance(h, RotatingFileHandler)
        and getattr(h, "baseFilename", "").endswith(os.path.basename(logfile))
        for h in root.handlers
    )
    if not has_file:
        fh = RotatingFileHandler(logfile, maxBytes=5 * 1024 * 1024, backupCount=3)
        fh.setLevel(logging.DEBUG)
        ffmt = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        fh.setFormatter(ffmt)
        root.addHandler(fh)

    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    ):
        ch = logging.StreamHandler()
        ch.setLevel(logging.CRITICAL)
        ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root.addHandler(ch)

    logging.debug("Logging initialized. run_id=%s file=%s", rid, logfile)
    os.environ["WPKIT_RID"] = rid
    return rid


def _rid() -> str:
    return _RUN_ID or os.environ.get("WPKIT_RID", "--------")


def status_pass(msg: str) -> None:
    print(f"PASS: {msg} [{_rid()}]")


def status_warn(msg: str) -> None:
    print(f"WARN: {msg} [{_rid()}]")


def status_fail(msg: str) -> None:
    print(f"FAIL: {msg} [{_rid()}]", flush=True)


def run_capture(args: Sequence[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run a command and capture its output.

    Raises CalledProcessError on non-zero exit and OSError (usually
    FileNotFoundError) when the binary cannot be spawned.
    """
    return subprocess.run(
        list(args),
        check=True,
        text=True,
        capture_output=True,
        cwd=cwd,
        encoding="utf-8",
        errors="replace",
    )


def log(msg: str) -> None:
    # File-oriented normal progress; stays out of console noise.
    logging.debug(msg)


def db_ident(name: str) -> str:
    parts: list[str] = []
    for char in name:
        if char.isalnum():
            parts.append(char)
            continue
        parts.append("_")
    return "".join(parts)


ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
NOISE_PREFIXES = (
    "PHP Warning:", "PHP Notice:", "PHP Deprecated:",
    "Warning:", "Notice:", "Deprecated:",
)


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


def drop_noise_lines(text: str) -> list[str]:
    out: list[str] = []
    for ln in strip_ansi(text or "").splitlines():
        ln = ln.strip()
        if not ln:
            continue
        if any(ln.startswith(p) for p in NOISE_PREFIXES):
            continue
        out.append(ln)
    return out


def error_text(err: BaseException) -> str:
    """Best human-readable text for a failed command."""
    if isinstance(err, subprocess.CalledProcessError):
        detail = "\n".join(drop_noise_lines(err.stderr or "")) or (err.stdout or "").strip()
        if detail:
            return detail
    return str(err)


def write_json_atomic(path: Path, data: Any) -> None:
    """Rewrite path with pretty JSON via temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", delete=False, dir=str(path.parent), encoding="utf-8"
    ) as tmp:
        json.dump(data, tmp, indent=2)
        tmp.write("\n")
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = tmp.name
    os.replace(tmp_path, str(path))
