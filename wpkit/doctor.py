"""Environment diagnostics for `scaffold.py doctor`.

Each check_* method is independent and never raises: failures are
returned as data and recorded as Issue entries on the instance, in the
order the checks ran.
"""

from __future__ import annotations

import logging
import os
import platform
import subprocess
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

import config
from wpkit import herd
from wpkit.mysql import ConnectionProber, MySQLDetectionError
from wpkit.settings import load_settings
from wpkit.textparse import (
    PHP_VERSION_RE,
    WP_CLI_VERSION_RE,
    is_below,
    missing_extensions,
    parse_version,
)
from wpkit.utils import log, run_capture

OPTIONAL_CHECKS = ("herd",)


@dataclass(frozen=True)
class Issue:
    description: str
    fix: str | None = None


@dataclass(frozen=True)
class ToolResult:
    ok: bool
    version: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class PhpResult:
    ok: bool
    version: str | None = None
    missing_extensions: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class MySQLResult:
    ok: bool
    connection: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class HerdResult:
    ok: bool
    installed: bool
    version: str | None = None


@dataclass(frozen=True)
class PermissionResult:
    ok: bool
    failed_dirs: tuple[str, ...] = ()


@dataclass(frozen=True)
class SettingsResult:
    ok: bool
    path: str
    exists: bool = False
    has_settings: bool = False
    error: str | None = None


@dataclass(frozen=True)
class EnvironmentInfo:
    os: str
    os_version: str
    python: str
    arch: str
    shell: str
    config_path: str


@dataclass(frozen=True)
class DoctorReport:
    wp_cli: ToolResult
    php: PhpResult
    mysql: MySQLResult
    herd: HerdResult
    permissions: PermissionResult
    config: SettingsResult
    environment: EnvironmentInfo
    issues: tuple[Issue, ...]

    def checks(self) -> dict[str, Any]:
        return {
            "wp_cli": self.wp_cli,
            "php": self.php,
            "mysql": self.mysql,
            "herd": self.herd,
            "permissions": self.permissions,
            "config": self.config,
        }

    def failed_checks(self) -> list[str]:
        return [
            name
            for name, result in self.checks().items()
            if not result.ok and name not in OPTIONAL_CHECKS
        ]

    def exit_code(self) -> int:
        return 1 if self.failed_checks() else 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Doctor:
    """Run the diagnostic battery against the current machine.

    Collaborators are injectable so tests can simulate any environment:
    runner executes commands (raising on failure), prober negotiates the
    MySQL transport, settings_loader reads persisted settings.
    """

    def __init__(
        self,
        runner: Callable[..., subprocess.CompletedProcess] = run_capture,
        prober: ConnectionProber | None = None,
        settings_loader: Callable[[], dict[str, Any]] = load_settings,
        wp_cli_path: Path | None = None,
        cwd: Path | None = None,
        user_dir: Path | None = None,
    ) -> None:
        self.runner = runner
        self.prober = prober or ConnectionProber(runner=runner)
        self.settings_loader = settings_loader
        self.wp_cli_path = Path(wp_cli_path or config.WP_CLI_PATH)
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.user_dir = Path(user_dir or config.USER_SITES_DIR)
        self.issues: list[Issue] = []

    def _issue(self, description: str, fix: str | None = None) -> None:
        log(f"ISSUE: {description}")
        self.issues.append(Issue(description, fix))

    def _output(self, args: list[str]) -> str:
        proc = self.runner(args)
        return proc.stdout or ""

    def check_wp_cli(self) -> ToolResult:
        if not os.path.exists(self.wp_cli_path):
            self._issue(
                "WP-CLI not found",
                "Will be auto-downloaded on first site creation",
            )
            return ToolResult(ok=False, error="Not found")
        try:
            out = self._output([config.PHP_BIN, str(self.wp_cli_path), "--version"])
        except (subprocess.CalledProcessError, OSError) as err:
            logging.error("WP-CLI --version failed: %s", err)
            self._issue(
                "WP-CLI not accessible",
                "Ensure PHP is installed and WP-CLI phar is executable",
            )
            return ToolResult(ok=False, error="Not accessible")
        return ToolResult(ok=True, version=parse_version(out, WP_CLI_VERSION_RE) or "unknown")

    def check_php(self) -> PhpResult:
        try:
            out = self._output([config.PHP_BIN, "--version"])
        except (subprocess.CalledProcessError, OSError) as err:
            logging.error("php --version failed: %s", err)
            self._issue(
                "PHP not found",
                "Install PHP: brew install php (macOS) or apt install php (Linux)",
            )
            return PhpResult(ok=False, error="Not installed")

        version = parse_version(out, PHP_VERSION_RE)
        if version is None:
            log(f"SKIP: could not parse PHP version from {out.strip()!r}")
        elif is_below(version, config.PHP_MIN_VERSION):
            minimum = ".".join(str(p) for p in config.PHP_MIN_VERSION)
            self._issue(
                f"PHP {version} is outdated (minimum: {minimum})",
                "Update PHP: brew upgrade php (macOS) or apt upgrade php (Linux)",
            )

        try:
            modules = self._output([config.PHP_BIN, "-m"])
        except (subprocess.CalledProcessError, OSError) as err:
            logging.error("php -m failed: %s", err)
            self._issue(
                "Could not list PHP extensions",
                "Run `php -m` and check your PHP installation",
            )
            return PhpResult(ok=True, version=version or "unknown", error="Extensions not listed")
        missing = tuple(missing_extensions(modules, config.PHP_REQUIRED_EXTENSIONS))
        if missing:
            self._issue(
                f"Missing PHP extensions: {', '.join(missing)}",
                "Install missing extensions via your PHP package manager",
            )
        return PhpResult(ok=True, version=version or "unknown", missing_extensions=missing)

    def check_mysql(self) -> MySQLResult:
        try:
            self.runner([config.MYSQL_BIN, "--version"])
        except (subprocess.CalledProcessError, OSError) as err:
            logging.error("mysql --version failed: %s", err)
            self._issue(
                "MySQL client not found",
                "Install MySQL: brew install mysql (macOS) or install Laravel Herd",
            )
            return MySQLResult(ok=False, error="MySQL client not installed")
        try:
            connection = self.prober.probe_connection(config.DEFAULT_DB_USER)
        except MySQLDetectionError as err:
            logging.error("MySQL detection failed: %s", err)
            self._issue(
                "MySQL not accessible",
                "Start MySQL: brew services start mysql, or install/start Laravel Herd",
            )
            return MySQLResult(ok=False, error="Not accessible")
        return MySQLResult(ok=True, connection=connection)

    def check_herd(self) -> HerdResult:
        if not herd.is_herd_installed(self.runner):
            return HerdResult(ok=True, installed=False)
        try:
            version = herd.herd_version(self.runner)
        except (subprocess.CalledProcessError, OSError):
            return HerdResult(ok=True, installed=False)
        return HerdResult(ok=True, installed=True, version=version)

    def check_permissions(self) -> PermissionResult:
        dirs = [self.cwd]
        if os.path.exists(self.user_dir):
            dirs.append(self.user_dir)

        failed: list[str] = []
        for directory in dirs:
            marker = directory / config.PERMISSION_MARKER
            try:
                marker.write_text("test", encoding="utf-8")
                marker.unlink()
            except OSError as err:
                log(f"FAIL: write test in {directory}: {err}")
                failed.append(str(directory))
                self._issue(f"No write permission: {directory}", f"chmod 755 {directory}")
        return PermissionResult(ok=not failed, failed_dirs=tuple(failed))

    def check_config(self) -> SettingsResult:
        path = config.CONFIG_FILE
        exists = os.path.exists(path)
        try:
            settings = self.settings_loader()
        except Exception as err:  # noqa: BLE001
            logging.error("Config load failed: %s", err)
            self._issue("Config file error", "Run any wpkit command to regenerate config")
            return SettingsResult(ok=False, path=str(path), exists=exists, error=str(err))
        return SettingsResult(
            ok=True,
            path=str(path),
            exists=exists,
            has_settings=bool(settings),
        )

    def environment_info(self) -> EnvironmentInfo:
        return EnvironmentInfo(
            os=sys.platform,
            os_version=platform.release(),
            python=platform.python_version(),
            arch=platform.machine(),
            shell=os.environ.get("SHELL", "unknown"),
            config_path=str(config.CONFIG_DIR),
        )

    def run_all_checks(self) -> DoctorReport:
        self.issues = []
        wp_cli = self.check_wp_cli()
        php = self.check_php()
        mysql = self.check_mysql()
        herd_result = self.check_herd()
        permissions = self.check_permissions()
        settings = self.check_config()
        return DoctorReport(
            wp_cli=wp_cli,
            php=php,
            mysql=mysql,
            herd=herd_result,
            permissions=permissions,
            config=settings,
            environment=self.environment_info(),
            issues=tuple(self.issues),
        )


def _status(name: str, result: Any, report: DoctorReport) -> str:
    if name in OPTIONAL_CHECKS:
        return "PASS" if result.installed else "SKIP"
    if not result.ok:
        return "FAIL"
    if name == "php" and (
        result.missing_extensions
        or result.error
        or any("outdated" in i.description for i in report.issues)
    ):
        return "WARN"
    return "PASS"


def _detail(name: str, result: Any) -> str:
    if name == "herd":
        return result.version if result.installed else "not installed (optional)"
    if not result.ok:
        if name == "permissions":
            return ", ".join(result.failed_dirs)
        return result.error or "failed"
    if name in ("wp_cli", "php"):
        return result.version or "unknown"
    if name == "mysql":
        return result.connection
    if name == "permissions":
        return "writable"
    return f"{result.path} ({'settings saved' if result.has_settings else 'no settings'})"


def format_report(report: DoctorReport) -> str:
    """Return a human-friendly diagnostics report."""
    lines = ["wpkit doctor", "-" * 60]
    for name, result in report.checks().items():
        lines.append(f"[{_status(name, result, report)}] {name}: {_detail(name, result)}")
    env = report.environment
    lines.append("-" * 60)
    lines.append(f"os: {env.os} {env.os_version} ({env.arch})")
    lines.append(f"python: {env.python}  shell: {env.shell}")
    lines.append(f"config: {env.config_path}")
    if report.issues:
        lines.append("-" * 60)
        lines.append(f"{len(report.issues)} issue(s):")
        for issue in report.issues:
            lines.append(f"  - {issue.description}")
            if issue.fix is not None:
                lines.append(f"    fix: {issue.fix}")
    lines.append("-" * 60)
    return "\n".join(lines)
