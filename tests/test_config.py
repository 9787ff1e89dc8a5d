# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_audit.config import AuditConfig, load_config
from site_audit.errors import ConfigError
from site_audit.routes import KEY_ROUTES


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("base_url: http://example.com\nconcurrency: 3", ".yaml", None),
        (json.dumps({"base_url": "http://example.com", "concurrency": 3}), ".json", None),
        ("{}", ".yaml", ValidationError),
        ("- a\n- b", ".yaml", ConfigError),
        ("key: [unclosed", ".yml", ConfigError),
        ("{not json", ".json", ConfigError),
        ("base_url = 'x'", ".toml", ConfigError),
        ("base_url: http://example.com\nunknown_field: 1", ".yaml", ValidationError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, AuditConfig)
        assert cfg.site_root == "http://example.com"
        assert cfg.concurrency == 3


def test_defaults():
    cfg = AuditConfig(base_url="https://example.com/")
    assert cfg.site_root == "https://example.com"
    assert cfg.compare_root is None
    assert cfg.sitemap_path == "/sitemap.xml"
    assert cfg.concurrency == 5
    assert cfg.retry_times == 1
    assert cfg.verification_meta == "google-site-verification"
    assert tuple(cfg.key_routes) == KEY_ROUTES
    assert len(cfg.key_routes) >= 10
    assert cfg.json_path == Path("reports") / "site-audit.json"


def test_overrides_win_and_none_is_ignored(tmp_path):
    cfg_path = write_file(tmp_path, "base_url: http://example.com\nconcurrency: 3", ".yaml")
    cfg = load_config(cfg_path, concurrency=7, limit=None, compare_base="http://localhost:3000")
    assert cfg.concurrency == 7
    assert cfg.limit is None
    assert cfg.compare_root == "http://localhost:3000"


def test_default_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(None, base_url="http://example.com")
    assert cfg.site_root == "http://example.com"


def test_default_file_is_read_when_present(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text(
        "base_url: http://example.com\ntimeout: 4", encoding="utf-8"
    )
    cfg = load_config(None)
    assert cfg.timeout == 4


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "field,value",
    [("concurrency", 0), ("retry_times", 2), ("timeout", 0), ("key_routes", []), ("key_routes", ["blog"])],
)
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        AuditConfig(base_url="http://example.com", **{field: value})


def test_sitemap_path_gets_leading_slash():
    cfg = AuditConfig(base_url="http://example.com", sitemap_path="sitemap_index.xml")
    assert cfg.sitemap_path == "/sitemap_index.xml"


def test_config_is_frozen():
    cfg = AuditConfig(base_url="http://example.com")
    with pytest.raises(ValidationError):
        cfg.concurrency = 10
