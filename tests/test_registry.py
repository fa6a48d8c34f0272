"""Tests for the site registry."""

from __future__ import annotations

import json

import pytest

import config
from wpkit import registry


def record(name: str, **overrides) -> dict:
    data = {
        "name": name,
        "path": f"/Users/test/Sites/{name}",
        "url": f"{name}.test",
        "created_at": "2024-01-01T00:00:00+00:00",
        "dbName": name.replace("-", "_"),
        "dbUser": "root",
        "dbHost": "127.0.0.1",
        "adminUser": "admin",
        "adminEmail": "admin@test.com",
    }
    data.update(overrides)
    return data


def test_empty_registry() -> None:
    assert registry.list_sites() == []
    assert registry.get_site("blog") is None
    assert registry.site_exists("blog") is False


def test_add_and_get() -> None:
    registry.add_site(record("blog"))

    assert registry.get_site("blog") == record("blog")
    stored = json.loads(config.SITES_FILE.read_text(encoding="utf-8"))
    assert [s["name"] for s in stored["sites"]] == ["blog"]


def test_insertion_order_and_replace() -> None:
    registry.add_site(record("one"))
    registry.add_site(record("two"))
    registry.add_site(record("one", dbHost="localhost"))

    sites = registry.list_sites()
    assert [s["name"] for s in sites] == ["two", "one"]
    assert sites[1]["dbHost"] == "localhost"


def test_created_at_defaults_to_now() -> None:
    registry.add_site({"name": "fresh", "path": "/tmp/fresh"})

    site = registry.get_site("fresh")
    assert site["created_at"].endswith("+00:00")
    assert site["dbHost"] is None


def test_unknown_fields_are_dropped() -> None:
    registry.add_site(record("blog", password="secret"))

    assert "password" not in registry.get_site("blog")


def test_remove_site() -> None:
    registry.add_site(record("one"))
    registry.add_site(record("two"))

    assert registry.remove_site("one") is True
    assert registry.remove_site("missing") is False
    assert [s["name"] for s in registry.list_sites()] == ["two"]


def test_corrupt_registry_reads_as_empty() -> None:
    config.SITES_FILE.parent.mkdir(parents=True)
    config.SITES_FILE.write_text("{", encoding="utf-8")

    assert registry.list_sites() == []
    assert registry.get_site("any") is None


def test_corrupt_registry_is_not_overwritten() -> None:
    config.SITES_FILE.parent.mkdir(parents=True)
    config.SITES_FILE.write_text('["not", "an", "object"]', encoding="utf-8")

    with pytest.raises(registry.RegistryError):
        registry.add_site({"name": "demo", "path": "/tmp/demo"})
    with pytest.raises(registry.RegistryError):
        registry.remove_site("demo")
    assert config.SITES_FILE.read_text(encoding="utf-8") == '["not", "an", "object"]'
