"""Scaffold a WordPress site: a linear list of WP-CLI steps."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import config
from wpkit import herd, registry
from wpkit.mysql import ConnectionProber, MySQLDetectionError
from wpkit.utils import error_text, log, run_capture, status_fail, status_pass, status_warn
from .cli import wp_run

DB_EXISTS_MARKERS = ("database exists", "ERROR 1007")


@dataclass
class SiteConfig:
    slug: str
    root_dir: Path
    db_name: str
    url: str
    title: str
    db_user: str = config.DEFAULT_DB_USER
    db_pass: str = ""
    db_host: str | None = None
    db_prefix: str = config.DEFAULT_DB_PREFIX
    admin_user: str = config.DEFAULT_ADMIN_USER
    admin_pass: str = config.DEFAULT_ADMIN_PASS
    admin_email: str = config.DEFAULT_ADMIN_EMAIL
    with_content: bool = False
    wp_version: str = config.DEFAULT_WP_VERSION
    no_db: bool = False
    use_herd: bool = False
    public_plugins: list[str] = field(default_factory=list)
    local_plugins: list[str] = field(default_factory=list)

    @property
    def site_path(self) -> Path:
        return self.root_dir / self.slug


def create_directory(site: SiteConfig) -> bool:
    path = site.site_path
    if path.exists():
        logging.error("Directory %s already exists", path)
        return False
    try:
        path.mkdir(parents=True)
    except OSError as err:
        logging.error("Could not create %s: %s", path, err)
        return False
    return True


def download_core(site: SiteConfig) -> bool:
    parts = ["core", "download"]
    if not site.with_content:
        parts.append("--skip-content")
    if site.wp_version and site.wp_version != "latest":
        parts.append(f"--version={site.wp_version}")
    ok, _, _, _ = wp_run(site.site_path, parts)
    return ok


def configure_database(site: SiteConfig, prober: ConnectionProber) -> bool:
    db_host = site.db_host
    if not db_host:
        try:
            db_host = prober.get_cached_connection(site.db_user)
        except MySQLDetectionError as err:
            logging.error("%s", err)
            return False
        site.db_host = db_host
        log(f"PASS: detected MySQL host {db_host}")

    parts = [
        "config", "create",
        f"--dbname={site.db_name}",
        f"--dbuser={site.db_user}",
    ]
    if site.db_pass:
        parts.append(f"--dbpass={site.db_pass}")
    else:
        parts.append("--prompt=")
    parts += [f"--dbhost={db_host}", f"--dbprefix={site.db_prefix}"]
    ok, _, _, _ = wp_run(site.site_path, parts)
    if not ok:
        return False
    if site.no_db:
        return True
    return create_database(site)


def create_database(site: SiteConfig) -> bool:
    ok, out, err, _ = wp_run(site.site_path, ["db", "create"])
    if ok:
        return True
    combined = f"{out}\n{err}"
    if not any(marker in combined for marker in DB_EXISTS_MARKERS):
        return False
    log(f"INFO: database {site.db_name} exists; resetting")
    ok, _, _, _ = wp_run(site.site_path, ["db", "reset", "--yes"])
    return ok


def install_wordpress(site: SiteConfig) -> bool:
    ok, _, _, _ = wp_run(
        site.site_path,
        [
            "core", "install",
            f"--url={site.url}",
            f"--title={site.title}",
            f"--admin_user={site.admin_user}",
            f"--admin_password={site.admin_pass}",
            f"--admin_email={site.admin_email}",
        ],
    )
    return ok


def install_plugins(site: SiteConfig) -> bool:
    for slug in site.public_plugins:
        ok, _, _, _ = wp_run(site.site_path, ["plugin", "install", slug, "--activate"])
        if not ok:
            logging.error("Could not install plugin: %s", slug)
            return False
    for zip_path in site.local_plugins:
        if not Path(zip_path).exists():
            log(f"SKIP: plugin archive missing {zip_path}")
            continue
        ok, _, _, _ = wp_run(site.site_path, ["plugin", "install", str(zip_path), "--activate"])
        if not ok:
            logging.error("Could not install plugin: %s", zip_path)
            return False
    return True


def setup_herd(site: SiteConfig, runner=run_capture) -> bool:
    if not herd.is_herd_installed(runner):
        log("SKIP: herd not installed")
        return False
    try:
        herd.herd_link(str(site.site_path), runner)
        herd.herd_secure(str(site.site_path), runner)
    except (subprocess.CalledProcessError, OSError) as err:
        logging.error("herd setup failed: %s", error_text(err))
        return False
    return True


def site_url(site: SiteConfig, secured: bool) -> str:
    if secured:
        return f"https://{site.slug}{config.DEFAULT_TLD}"
    return f"http://{site.url}"


def register(site: SiteConfig) -> bool:
    try:
        registry.add_site(
            {
                "name": site.slug,
                "path": str(site.site_path),
                "url": site.url,
                "dbName": site.db_name,
                "dbUser": site.db_user,
                "dbHost": site.db_host,
                "adminUser": site.admin_user,
                "adminEmail": site.admin_email,
            }
        )
    except (registry.RegistryError, OSError) as err:
        logging.error("Could not record site %s: %s", site.slug, err)
        return False
    return True


def scaffold_site(site: SiteConfig, prober: ConnectionProber | None = None, runner=run_capture) -> bool:
    prober = prober or ConnectionProber(runner=runner)
    if not create_directory(site):
        status_fail(f"directory {site.site_path} exists or is not writable")
        return False
    status_pass("create directory")
    if not download_core(site):
        status_fail("core download; see log")
        return False
    status_pass("core download")
    if not configure_database(site, prober):
        status_fail("database configuration; see log")
        return False
    status_pass("configure database")
    if site.no_db:
        if not register(site):
            status_fail("site registry; see log")
            return False
        status_warn(f"database not created; create {site.db_name} before visiting the site")
        return True
    if not install_wordpress(site):
        status_fail("core install; see log")
        return False
    status_pass("core install")
    if not install_plugins(site):
        status_fail("plugin install; see log")
        return False
    status_pass("plugins")
    secured = False
    if site.use_herd:
        secured = setup_herd(site, runner)
        if secured:
            status_pass("herd link + secure")
        else:
            status_warn("herd setup skipped; see log")
    if not register(site):
        status_fail("site registry; see log")
        return False
    status_pass(f"site {site.slug} ready at {site_url(site, secured)}")
    if not site.with_content:
        status_warn("frontend is blank (no theme installed); use --with-content or add a theme")
    return True
