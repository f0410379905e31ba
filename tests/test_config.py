"""Tests for packages.json parsing and run settings."""

from __future__ import annotations

import json

import pytest

from package_scraper.config import ScraperSettings, load_config, parse_config
from package_scraper.exceptions import ConfigParseError, SettingsError


class TestParseConfig:
    def test_groups_in_order(self, tmp_path):
        text = json.dumps(
            {
                "api": [{"name": "svc-a", "path": "./svc-a"}, {"name": "svc-b", "path": "svc-b"}],
                "web": [{"name": "site", "path": "/srv/site"}],
            }
        )
        groups = parse_config(text, tmp_path)
        assert list(groups) == ["api", "web"]
        assert [p.name for p in groups["api"]] == ["svc-a", "svc-b"]
        assert groups["api"][0].path == tmp_path / "svc-a"
        assert groups["api"][1].path == tmp_path / "svc-b"
        assert str(groups["web"][0].path) == "/srv/site"
        assert groups["web"][0].group == "web"

    def test_empty_group_allowed(self, tmp_path):
        assert parse_config('{"empty": []}', tmp_path) == {"empty": []}

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ConfigParseError, match="invalid JSON"):
            parse_config("{", tmp_path)

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigParseError):
            parse_config('[{"name": "a", "path": "."}]', tmp_path)

    def test_missing_path(self, tmp_path):
        with pytest.raises(ConfigParseError):
            parse_config('{"api": [{"name": "svc-a"}]}', tmp_path)

    def test_blank_name(self, tmp_path):
        with pytest.raises(ConfigParseError):
            parse_config('{"api": [{"name": " ", "path": "."}]}', tmp_path)

    def test_duplicate_project_in_group(self, tmp_path):
        text = '{"api": [{"name": "a", "path": "x"}, {"name": "a", "path": "y"}]}'
        with pytest.raises(ConfigParseError, match="duplicate"):
            parse_config(text, tmp_path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigParseError, match="cannot read"):
            load_config(tmp_path / "packages.json")

    def test_load_invalid_utf8(self, tmp_path):
        (tmp_path / "packages.json").write_bytes(b'{"g\xff": []}')
        with pytest.raises(ConfigParseError, match="not valid UTF-8"):
            load_config(tmp_path / "packages.json")

    def test_load_defaults_base_dir_to_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "packages.json").write_text('{"api": [{"name": "a", "path": "./a"}]}')
        monkeypatch.chdir(tmp_path)
        groups = load_config(tmp_path / "packages.json")
        assert groups["api"][0].path == tmp_path / "a"


class TestScraperSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PACKAGE_SCRAPER_AUDIT_LEVEL", raising=False)
        settings = ScraperSettings()
        assert settings.audit_command == ["yarn", "audit", "--json", "--level=low"]
        assert settings.usage_command == ["npx", "depcheck", "--json"]
        assert settings.prune is True
        assert settings.fail_fast is False

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("PACKAGE_SCRAPER_AUDIT_LEVEL", "HIGH")
        assert ScraperSettings().audit_level == "high"

    def test_unknown_level(self):
        with pytest.raises(SettingsError, match="unknown audit level"):
            ScraperSettings(audit_level="severe")

    def test_unknown_level_from_env(self, monkeypatch):
        monkeypatch.setenv("PACKAGE_SCRAPER_AUDIT_LEVEL", "severe")
        with pytest.raises(SettingsError, match="'severe'"):
            ScraperSettings()
