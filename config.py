"""Shared configuration constants for wpkit.

Centralizes paths, binaries and site defaults used by the package.
"""

import os
from pathlib import Path

CONFIG_DIR = Path(
    os.environ.get("WPKIT_CONFIG_DIR", str(Path.home() / ".config" / "wpkit"))
)
CONFIG_FILE = CONFIG_DIR / "config.json"
SITES_FILE = CONFIG_DIR / "sites.json"
LOG_DIR = CONFIG_DIR / "log"

WP_CLI_URL = "https://raw.githubusercontent.com/wp-cli/builds/gh-pages/phar/wp-cli.phar"
WP_CLI_PATH = CONFIG_DIR / "bin" / "wp-cli.phar"
WP_TIMEOUT = int(os.environ.get("WP_TIMEOUT", "600"))  # seconds

PHP_BIN = os.environ.get("WPKIT_PHP", "php")
MYSQL_BIN = os.environ.get("WPKIT_MYSQL", "mysql")
HERD_BIN = os.environ.get("WPKIT_HERD", "herd")

# Tried in order; TCP first, numeric loopback before the hostname.
MYSQL_TCP_HOSTS = ("127.0.0.1", "localhost")
MYSQL_SOCKET_PATHS = (
    "/tmp/mysql_3306.sock",  # Laravel Herd
    "/tmp/mysql.sock",  # Homebrew
    "/var/run/mysqld/mysqld.sock",  # Debian/Ubuntu
    "/Applications/MAMP/tmp/mysql/mysql.sock",  # MAMP
    "/opt/homebrew/var/mysql/mysql.sock",  # Homebrew, Apple Silicon
    "/usr/local/var/mysql/mysql.sock",  # Homebrew, Intel
)

PHP_MIN_VERSION = (7, 4)
PHP_REQUIRED_EXTENSIONS = ("mysqli", "curl", "json", "mbstring")

PERMISSION_MARKER = ".wpkit-test"
USER_SITES_DIR = Path.home() / "Sites"

DEFAULT_DB_USER = "root"
DEFAULT_DB_PREFIX = "wp_"
DEFAULT_WP_VERSION = "latest"
DEFAULT_ADMIN_USER = "admin"
DEFAULT_ADMIN_PASS = "admin"
DEFAULT_ADMIN_EMAIL = "admin@test.com"
DEFAULT_TLD = ".test"
