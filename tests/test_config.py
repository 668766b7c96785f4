"""Tests for wallstudio.config: defaults, TOML loading, env vars, CLI overrides."""

from pathlib import Path

import pytest
from wallstudio import config as config_module
from wallstudio.backends.base import create_backend
from wallstudio.backends.http import HttpBackend
from wallstudio.backends.local import LocalStore
from wallstudio.config import StudioConfig, load_config, merge_cli_overrides

ENV_VARS = (
    "WALLSTUDIO_API_URL",
    "WALLSTUDIO_API_TOKEN",
    "WALLSTUDIO_API_TIMEOUT",
    "WALLSTUDIO_STORE_PATH",
    "WALLSTUDIO_UPLOAD_LIMIT_MB",
    "WALLSTUDIO_RECONCILE_CONCURRENT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and home directory."""
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path])


class TestDefaults:
    def test_defaults(self):
        cfg = StudioConfig()
        assert cfg.api.base_url == ""
        assert cfg.api.is_configured is False
        assert cfg.api.timeout == 30.0
        assert cfg.store.path == "./.wallstudio-store.json"
        assert cfg.uploads.base_limit_mb == 10
        assert cfg.reconcile.concurrent is False

    def test_store_path_expands_user(self):
        cfg = StudioConfig.model_validate({"store": {"path": "~/lib.json"}})
        assert cfg.store.resolved_path == Path.home() / "lib.json"


class TestLoadConfig:
    def test_explicit_path(self, tmp_path):
        toml_path = tmp_path / "custom.toml"
        toml_path.write_text(
            '[api]\nbase_url = "https://api.test"\ntoken = "abc"\n'
            "[uploads]\nbase_limit_mb = 20\n"
        )
        cfg = load_config(toml_path)
        assert cfg.api.base_url == "https://api.test"
        assert cfg.api.token == "abc"
        assert cfg.uploads.base_limit_mb == 20

    def test_missing_path_returns_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "nonexistent.toml")
        assert cfg == StudioConfig()

    def test_search_path(self, tmp_path):
        (tmp_path / ".wallstudio.toml").write_text("[reconcile]\nconcurrent = true\n")
        assert load_config().reconcile.concurrent is True

    def test_global_config_fallback(self, tmp_path):
        global_dir = tmp_path / "home" / ".config" / "wallstudio"
        global_dir.mkdir(parents=True)
        (global_dir / "config.toml").write_text('[store]\npath = "/data/lib.json"\n')
        assert load_config().store.path == "/data/lib.json"

    def test_invalid_toml_returns_defaults(self, tmp_path):
        toml_path = tmp_path / "bad.toml"
        toml_path.write_text("[api\nbase_url = ")
        cfg = load_config(toml_path)
        assert cfg.api.base_url == ""


class TestEnvVars:
    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        toml_path = tmp_path / "custom.toml"
        toml_path.write_text('[api]\nbase_url = "https://toml.test"\n')
        monkeypatch.setenv("WALLSTUDIO_API_URL", "https://env.test")
        monkeypatch.setenv("WALLSTUDIO_API_TIMEOUT", "2.5")
        monkeypatch.setenv("WALLSTUDIO_UPLOAD_LIMIT_MB", "15")
        cfg = load_config(toml_path)
        assert cfg.api.base_url == "https://env.test"
        assert cfg.api.timeout == 2.5
        assert cfg.uploads.base_limit_mb == 15

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)],
    )
    def test_concurrent_flag(self, monkeypatch, raw, expected):
        monkeypatch.setenv("WALLSTUDIO_RECONCILE_CONCURRENT", raw)
        assert load_config().reconcile.concurrent is expected


class TestCliOverrides:
    def test_overrides_only_given_values(self):
        base = StudioConfig.model_validate({"api": {"token": "keep"}})
        cfg = merge_cli_overrides(base, api_url="https://cli.test", store_path=None)
        assert cfg.api.base_url == "https://cli.test"
        assert cfg.api.token == "keep"
        assert cfg.store.path == base.store.path

    def test_unknown_keys_ignored(self):
        cfg = merge_cli_overrides(StudioConfig(), colour="blue")
        assert cfg == StudioConfig()

    def test_does_not_mutate_input(self):
        base = StudioConfig()
        merge_cli_overrides(base, concurrent=True, upload_limit_mb=5)
        assert base.reconcile.concurrent is False
        assert base.uploads.base_limit_mb == 10


class TestCreateBackend:
    def test_local_by_default(self, tmp_path):
        cfg = merge_cli_overrides(StudioConfig(), store_path=str(tmp_path / "lib.json"))
        backend = create_backend(cfg)
        assert isinstance(backend, LocalStore)
        assert backend.path == tmp_path / "lib.json"

    def test_http_when_api_configured(self):
        cfg = merge_cli_overrides(StudioConfig(), api_url="https://api.test")
        backend = create_backend(cfg)
        assert isinstance(backend, HttpBackend)
        assert backend.base_url == "https://api.test"
