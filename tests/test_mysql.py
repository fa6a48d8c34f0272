"""Tests for MySQL connection detection."""

from __future__ import annotations

import pytest

from conftest import FakeRunner
from wpkit.mysql import ClientNotInstalled, ConnectionProber, NoConnectionFound

SOCKETS = (
    "/tmp/mysql_3306.sock",
    "/tmp/mysql.sock",
    "/var/run/mysqld/mysqld.sock",
    "/opt/homebrew/var/mysql/mysql.sock",
)


def mysql_rule(*working: str):
    """Succeed for `--version` and for probes using any of the given flags."""

    def rule(args):
        if args[1] == "--version":
            return "mysql  Ver 8.0.33 for macos13 on arm64"
        if args[1] in working:
            return "1"
        return None

    return rule


def make_prober(runner, existing=()):
    existing = set(existing)
    return ConnectionProber(
        runner=runner,
        exists=lambda p: p in existing,
        mysql_bin="mysql",
        tcp_hosts=("127.0.0.1", "localhost"),
        socket_paths=SOCKETS,
    )


def probed_addresses(runner):
    return [c[1] for c in runner.calls if c[1] != "--version"]


def test_tcp_loopback_wins_over_working_socket() -> None:
    runner = FakeRunner(mysql_rule("-h127.0.0.1", "--socket=/tmp/mysql.sock"))
    prober = make_prober(runner, existing=["/tmp/mysql.sock"])

    assert prober.probe_connection("root") == "127.0.0.1"
    assert probed_addresses(runner) == ["-h127.0.0.1"]


def test_localhost_wins_over_socket_when_loopback_fails() -> None:
    runner = FakeRunner(mysql_rule("-hlocalhost", "--socket=/tmp/mysql_3306.sock"))
    prober = make_prober(runner, existing=["/tmp/mysql_3306.sock"])

    assert prober.probe_connection("root") == "localhost"
    assert probed_addresses(runner) == ["-h127.0.0.1", "-hlocalhost"]


def test_falls_back_to_existing_socket() -> None:
    runner = FakeRunner(mysql_rule("--socket=/tmp/mysql.sock"))
    prober = make_prober(runner, existing=["/tmp/mysql.sock"])

    assert prober.probe_connection("root") == "localhost:/tmp/mysql.sock"


def test_missing_socket_is_never_probed() -> None:
    runner = FakeRunner(mysql_rule("--socket=/opt/homebrew/var/mysql/mysql.sock"))
    prober = make_prober(runner, existing=["/opt/homebrew/var/mysql/mysql.sock"])

    result = prober.probe_connection("root")

    assert result == "localhost:/opt/homebrew/var/mysql/mysql.sock"
    assert probed_addresses(runner) == [
        "-h127.0.0.1",
        "-hlocalhost",
        "--socket=/opt/homebrew/var/mysql/mysql.sock",
    ]


def test_tries_sockets_in_declared_order() -> None:
    runner = FakeRunner(mysql_rule("--socket=/tmp/mysql.sock", "--socket=/var/run/mysqld/mysqld.sock"))
    prober = make_prober(runner, existing=["/tmp/mysql.sock", "/var/run/mysqld/mysqld.sock"])

    assert prober.probe_connection("root") == "localhost:/tmp/mysql.sock"


def test_client_missing_fails_before_any_probe() -> None:
    runner = FakeRunner(lambda args: FileNotFoundError(2, "No such file", "mysql"))
    prober = make_prober(runner, existing=SOCKETS)

    with pytest.raises(ClientNotInstalled, match="not installed or not in PATH"):
        prober.probe_connection("root")
    assert runner.calls == [["mysql", "--version"]]


def test_exhausted_candidates_lists_every_option() -> None:
    runner = FakeRunner(mysql_rule())
    prober = make_prober(runner, existing=["/tmp/mysql_3306.sock"])

    with pytest.raises(NoConnectionFound) as excinfo:
        prober.probe_connection("root")

    message = str(excinfo.value)
    assert "Could not detect MySQL connection" in message
    for option in ("127.0.0.1", "localhost") + SOCKETS:
        assert option in message


def test_probe_uses_given_user() -> None:
    runner = FakeRunner(mysql_rule("-h127.0.0.1"))
    prober = make_prober(runner)

    assert prober.probe_connection("customuser") == "127.0.0.1"
    probe = runner.calls[1]
    assert probe == ["mysql", "-h127.0.0.1", "-ucustomuser", "-e", "SELECT 1", "--silent"]


def test_cached_connection_probes_once_per_user() -> None:
    runner = FakeRunner(mysql_rule("-h127.0.0.1"))
    prober = make_prober(runner)

    assert prober.get_cached_connection("root") == "127.0.0.1"
    assert prober.get_cached_connection("root") == "127.0.0.1"

    assert runner.count(lambda c: c[1] == "--version") == 1
    assert runner.count(lambda c: "SELECT 1" in c) == 1


def test_cache_is_keyed_by_user() -> None:
    runner = FakeRunner(mysql_rule("-h127.0.0.1"))
    prober = make_prober(runner)

    prober.get_cached_connection("root")
    prober.get_cached_connection("wp")

    assert runner.count(lambda c: c[1] == "--version") == 2
    assert runner.count(lambda c: "-uwp" in c) == 1


def test_fresh_prober_has_empty_cache() -> None:
    runner = FakeRunner(mysql_rule("-h127.0.0.1"))
    make_prober(runner).get_cached_connection("root")
    make_prober(runner).get_cached_connection("root")

    assert runner.count(lambda c: c[1] == "--version") == 2


def test_failed_probe_is_not_cached() -> None:
    working: set[str] = set()

    def rule(args):
        if args[1] == "--version":
            return "mysql  Ver 8.0.33"
        return "1" if args[1] in working else None

    prober = make_prober(FakeRunner(rule))
    with pytest.raises(NoConnectionFound):
        prober.get_cached_connection("root")

    working.add("-hlocalhost")
    assert prober.get_cached_connection("root") == "localhost"
