#!/usr/bin/env python3
"""CLI to scaffold, inspect or remove local WordPress sites.

Subcommands: create, doctor, list, info, delete, config.
Side effects: creates site directories under the current directory, runs
WP-CLI / mysql / herd, and records sites in ~/.config/wpkit/sites.json.
"""
import argparse
import json
import sys
from pathlib import Path

import config
from wpkit import registry, settings
from wpkit.doctor import Doctor, format_report
from wpkit.utils import db_ident, init_logging, status_fail, status_pass
from wpkit.validators import is_valid_db_name, is_valid_email, normalize_db_prefix, normalize_url
from wpkit.wordpress.cli import WpCliError, ensure_wp_cli
from wpkit.wordpress.installer import SiteConfig, scaffold_site
from wpkit.wordpress.site import delete_site, get_basic_site_info, get_full_site_info


# ─── create ──────────────────────────────────────────────────────────────
def _title_from_slug(slug: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in slug.split("-"))


def _local_plugin_zips(plugins_dir: str | None) -> list[str]:
    if not plugins_dir:
        return []
    path = Path(plugins_dir)
    if not path.is_dir():
        return []
    return [str(p) for p in sorted(path.glob("*.zip"))]


def build_site_config(args: argparse.Namespace, saved: dict, cwd: Path) -> SiteConfig:
    """Merge flags over saved settings over built-in defaults.

    Raises ValueError on invalid names, prefixes, URLs or emails.
    """
    slug = args.name
    db_name = args.dbname or db_ident(slug)
    if not is_valid_db_name(db_name):
        raise ValueError(
            f"Invalid database name: {db_name}. Must be alphanumeric with underscores, max 64 chars."
        )
    tld = saved.get("tld") or config.DEFAULT_TLD
    admin_email = args.admin_email or saved.get("adminEmail") or config.DEFAULT_ADMIN_EMAIL
    if not is_valid_email(admin_email):
        raise ValueError(f"Invalid admin email: {admin_email}")
    no_db = args.no_db
    return SiteConfig(
        slug=slug,
        root_dir=cwd,
        db_name=db_name,
        db_user=args.dbuser or saved.get("dbuser") or config.DEFAULT_DB_USER,
        db_pass=args.dbpass or "",
        db_host=args.dbhost or saved.get("dbhost") or None,
        db_prefix=normalize_db_prefix(args.dbprefix or saved.get("dbprefix") or config.DEFAULT_DB_PREFIX),
        url=normalize_url(args.url or f"{slug}{tld}", tld),
        title=args.title or _title_from_slug(slug),
        admin_user=args.admin_user or saved.get("adminUser") or config.DEFAULT_ADMIN_USER,
        admin_pass=args.admin_pass or config.DEFAULT_ADMIN_PASS,
        admin_email=admin_email,
        with_content=args.with_content,
        wp_version=args.wp_version,
        no_db=no_db,
        use_herd=args.herd,
        public_plugins=[] if no_db else list(saved.get("publicPlugins") or []),
        local_plugins=[] if no_db else _local_plugin_zips(saved.get("defaultPluginsPath")),
    )


def cmd_create(args: argparse.Namespace) -> int:
    settings.ensure_default_settings()
    try:
        site = build_site_config(args, settings.get_settings(), Path.cwd())
    except ValueError as err:
        status_fail(f"configuration error: {err}")
        return 1
    try:
        ensure_wp_cli()
    except WpCliError as err:
        status_fail(str(err))
        return 1
    status_pass("wp-cli available")
    if not scaffold_site(site):
        return 1
    print(f"Admin: http://{site.url}/wp-admin  user={site.admin_user} pass={site.admin_pass}")
    return 0


# ─── doctor ──────────────────────────────────────────────────────────────
def cmd_doctor(args: argparse.Namespace) -> int:
    report = Doctor().run_all_checks()
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))
    failed = report.failed_checks()
    if failed:
        status_fail(f"doctor: {', '.join(failed)}")
        return 1
    status_pass(f"doctor: {len(report.issues)} issue(s)")
    return 0


# ─── list / info ─────────────────────────────────────────────────────────
def cmd_list(args: argparse.Namespace) -> int:
    sites = registry.list_sites()
    if not sites:
        print("No sites registered yet. Create one with: wpkit create <name>")
        return 0
    for site in sites:
        created = (site.get("created_at") or "")[:10]
        print(f"{site['name']:<24} {site.get('url') or '':<32} {created}  {site.get('path')}")
    return 0


def _print_info(info: dict) -> None:
    for key, value in info.items():
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        elif isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items()) or "(none)"
        print(f"{key:<14} {value}")


def cmd_info(args: argparse.Namespace) -> int:
    if args.basic:
        info = get_basic_site_info(args.name)
    else:
        info = get_full_site_info(args.name)
    if info is None:
        status_fail(f"site {args.name} is not registered")
        return 1
    _print_info(info)
    if not info["exists"]:
        status_fail(f"site directory missing: {info['path']}")
        return 1
    return 0


# ─── delete ──────────────────────────────────────────────────────────────
def cmd_delete(args: argparse.Namespace) -> int:
    if not registry.site_exists(args.name):
        status_fail(f"site {args.name} is not registered")
        return 1
    if not args.yes:
        status_fail("refusing to delete without --yes")
        return 1
    ok = delete_site(args.name, keep_db=args.keep_db, keep_files=args.keep_files)
    return 0 if ok else 1


# ─── config ──────────────────────────────────────────────────────────────
def cmd_config(args: argparse.Namespace) -> int:
    if args.list:
        current = settings.get_settings()
        if not current:
            print("No configuration set yet. Valid keys:")
            for key in settings.VALID_KEYS:
                print(f"  - {key}")
            return 0
        for key, value in current.items():
            if isinstance(value, list):
                value = ", ".join(value)
            print(f"  {key}: {value}")
        return 0

    if not args.key or not args.value:
        status_fail("both key and value are required (or use --list)")
        return 1
    key = settings.to_setting_key(args.key)
    if key not in settings.VALID_KEYS:
        status_fail(f"invalid config key {args.key!r}")
        return 1
    try:
        if args.add:
            settings.add_setting_values(key, args.value)
            status_pass(f"added to {args.key}: {args.value}")
        elif args.remove:
            settings.remove_setting_values(key, args.value)
            status_pass(f"removed from {args.key}: {args.value}")
        elif key in settings.PATH_KEYS:
            absolute = Path(args.value).resolve()
            if not absolute.exists():
                status_fail(f"path does not exist: {absolute}")
                return 1
            settings.set_setting(key, str(absolute))
            status_pass(f"set {args.key} to {absolute}")
        else:
            settings.set_setting(key, args.value)
            status_pass(f"set {args.key} to {args.value}")
    except OSError as err:
        status_fail(f"error saving config: {err}")
        return 1
    return 0


# ─── CLI ─────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wpkit", description="Scaffold local WordPress sites with WP-CLI"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="scaffold a new site in ./<name>")
    create.add_argument("name")
    create.add_argument("--no-db", action="store_true", help="only write wp-config.php")
    create.add_argument("--with-content", action="store_true")
    create.add_argument("--wp-version", default=config.DEFAULT_WP_VERSION)
    create.add_argument("--dbname")
    create.add_argument("--dbuser")
    create.add_argument("--dbpass")
    create.add_argument("--dbhost", help="default: auto-detected")
    create.add_argument("--dbprefix")
    create.add_argument("--admin-user")
    create.add_argument("--admin-pass")
    create.add_argument("--admin-email")
    create.add_argument("--url")
    create.add_argument("--title")
    create.add_argument("--herd", action="store_true", help="run herd link + secure")
    create.set_defaults(func=cmd_create)

    doctor = sub.add_parser("doctor", help="diagnose the local environment")
    doctor.add_argument("--json", action="store_true")
    doctor.set_defaults(func=cmd_doctor)

    lst = sub.add_parser("list", help="list registered sites")
    lst.set_defaults(func=cmd_list)

    info = sub.add_parser("info", help="show details for a site")
    info.add_argument("name")
    info.add_argument("--basic", action="store_true", help="skip WP-CLI probes")
    info.set_defaults(func=cmd_info)

    delete = sub.add_parser("delete", help="remove a site")
    delete.add_argument("name")
    delete.add_argument("--keep-db", action="store_true")
    delete.add_argument("--keep-files", action="store_true")
    delete.add_argument("-y", "--yes", action="store_true")
    delete.set_defaults(func=cmd_delete)

    cfg = sub.add_parser("config", help="manage saved defaults")
    cfg.add_argument("key", nargs="?")
    cfg.add_argument("value", nargs="?")
    mode = cfg.add_mutually_exclusive_group()
    mode.add_argument("-l", "--list", action="store_true")
    mode.add_argument("--add", action="store_true")
    mode.add_argument("--remove", action="store_true")
    cfg.set_defaults(func=cmd_config)
    return parser


def main(argv: list[str] | None = None) -> int:
    init_logging(None)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
