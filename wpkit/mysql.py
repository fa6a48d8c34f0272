"""Locate a working MySQL/MariaDB connection for WP-CLI.

Candidates are tried in a fixed order: TCP hosts first, then socket
paths that exist on disk. The first candidate where `SELECT 1` succeeds
wins. Results are returned in WP-CLI `--dbhost` form: a bare host for
TCP, "localhost:<socket>" for a socket.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

import config
from wpkit.utils import log, run_capture

TCP = "tcp"
SOCKET = "socket"


class MySQLDetectionError(Exception):
    """Base class for connection detection failures."""


class ClientNotInstalled(MySQLDetectionError):
    pass


class NoConnectionFound(MySQLDetectionError):
    pass


@dataclass(frozen=True)
class ConnectionCandidate:
    kind: str
    address: str

    def argv(self) -> list[str]:
        if self.kind == SOCKET:
            return [f"--socket={self.address}"]
        return [f"-h{self.address}"]

    def dbhost(self) -> str:
        if self.kind == SOCKET:
            return f"localhost:{self.address}"
        return self.address


class ConnectionProber:
    """Probe candidates and cache the winner per MySQL user.

    The cache lives on the instance; build a new prober for a fresh one.
    """

    def __init__(
        self,
        runner: Callable[..., subprocess.CompletedProcess] = run_capture,
        exists: Callable[[str], bool] = os.path.exists,
        mysql_bin: str = config.MYSQL_BIN,
        tcp_hosts: Sequence[str] = config.MYSQL_TCP_HOSTS,
        socket_paths: Sequence[str] = config.MYSQL_SOCKET_PATHS,
    ) -> None:
        self.runner = runner
        self.exists = exists
        self.mysql_bin = mysql_bin
        self.tcp_hosts = tuple(tcp_hosts)
        self.socket_paths = tuple(socket_paths)
        self._cache: dict[str, str] = {}

    def candidates(self) -> list[ConnectionCandidate]:
        found = [ConnectionCandidate(TCP, host) for host in self.tcp_hosts]
        found += [ConnectionCandidate(SOCKET, path) for path in self.socket_paths]
        return found

    def client_version(self) -> str:
        try:
            proc = self.runner([self.mysql_bin, "--version"])
        except (subprocess.CalledProcessError, OSError) as err:
            logging.error("mysql --version failed: %s", err)
            raise ClientNotInstalled(
                "MySQL client is not installed or not in PATH. Please install MySQL."
            ) from err
        return (proc.stdout or "").strip()

    def test_connection(self, candidate: ConnectionCandidate, user: str) -> bool:
        args = [self.mysql_bin] + candidate.argv() + [f"-u{user}", "-e", "SELECT 1", "--silent"]
        try:
            self.runner(args)
        except (subprocess.CalledProcessError, OSError) as err:
            log(f"SKIP: mysql {candidate.kind} {candidate.address} as {user}: {err}")
            return False
        log(f"PASS: mysql {candidate.kind} {candidate.address} as {user}")
        return True

    def probe_connection(self, user: str = config.DEFAULT_DB_USER) -> str:
        """Return the first working dbhost string for user.

        Raises ClientNotInstalled before trying any candidate when the
        client binary is unusable, NoConnectionFound when all fail.
        """
        self.client_version()
        for candidate in self.candidates():
            if candidate.kind == SOCKET and not self.exists(candidate.address):
                continue
            if self.test_connection(candidate, user):
                return candidate.dbhost()
        raise NoConnectionFound(self._failure_message())

    def get_cached_connection(self, user: str = config.DEFAULT_DB_USER) -> str:
        if user not in self._cache:
            self._cache[user] = self.probe_connection(user)
        return self._cache[user]

    def _failure_message(self) -> str:
        tcp = "\n".join(f"  - {host}" for host in self.tcp_hosts)
        sockets = "\n".join(f"  - {path}" for path in self.socket_paths)
        return (
            "Could not detect MySQL connection. Please ensure MySQL is running.\n"
            f"\nTCP/IP connections tried:\n{tcp}"
            f"\n\nSocket locations checked:\n{sockets}"
        )
