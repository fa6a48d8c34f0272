"""Shared fixtures: isolated config dir and a fake process runner."""

from __future__ import annotations

import subprocess
from typing import Callable

import pytest

import config


def completed(args: list[str], stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args, 0, stdout=stdout, stderr="")


def failure(args: list[str], stderr: str = "error") -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(1, args, output="", stderr=stderr)


class FakeRunner:
    """Stand-in for wpkit.utils.run_capture.

    rule(args) returns stdout text for a successful run, None for a
    non-zero exit, or an exception instance to raise as-is.
    """

    def __init__(self, rule: Callable[[list[str]], object]) -> None:
        self.rule = rule
        self.calls: list[list[str]] = []
        self.cwds: list[str | None] = []

    def __call__(self, args, cwd=None):
        args = list(args)
        self.calls.append(args)
        self.cwds.append(cwd)
        out = self.rule(args)
        if out is None:
            raise failure(args)
        if isinstance(out, BaseException):
            raise out
        return completed(args, str(out))

    def count(self, predicate: Callable[[list[str]], bool]) -> int:
        return len([c for c in self.calls if predicate(c)])


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    cfg = tmp_path / "cfg"
    monkeypatch.setattr(config, "CONFIG_DIR", cfg)
    monkeypatch.setattr(config, "CONFIG_FILE", cfg / "config.json")
    monkeypatch.setattr(config, "SITES_FILE", cfg / "sites.json")
    monkeypatch.setattr(config, "LOG_DIR", cfg / "log")
    monkeypatch.setattr(config, "WP_CLI_PATH", cfg / "bin" / "wp-cli.phar")
    monkeypatch.setattr(config, "PHP_BIN", "php")
    monkeypatch.setattr(config, "MYSQL_BIN", "mysql")
    monkeypatch.setattr(config, "HERD_BIN", "herd")
    return cfg
