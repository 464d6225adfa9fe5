# tests/test_config.py
# Tests for configuration loading.

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from cachet_gating.core.config import (
    GatingConfig,
    clear_config_cache,
    load_config,
    resolve_config,
)
from cachet_gating.registry import MIN_REFRESH_INTERVAL, SourceFailurePolicy


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test in an empty directory with an empty home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
    clear_config_cache()
    yield
    clear_config_cache()


def write_config(path: Path, data: dict) -> Path:
    path.write_text(yaml.dump(data))
    return path


class TestLoadConfig:

    def test_no_config_returns_none(self):
        assert load_config() is None

    def test_loads_explicit_path(self, tmp_path):
        path = write_config(tmp_path / "custom.yaml", {
            "sources": [
                {"base_url": "https://status.example.com/", "auth_token": "abc"},
                {"base_url": "https://other.example.com", "insecure_tls": True},
            ],
            "refresh_interval": 30,
            "on_source_failure": "mark_unknown",
            "max_wait": 600,
            "report_dir": "out/reports",
        })
        config = load_config(path)

        assert [s.base_url for s in config.sources] == [
            "https://status.example.com",
            "https://other.example.com",
        ]
        assert config.sources[0].auth_token == "abc"
        assert config.sources[1].insecure_tls is True
        assert config.on_source_failure is SourceFailurePolicy.MARK_UNKNOWN
        assert config.max_wait == 600
        assert config.report_dir == Path("out/reports")

    def test_finds_config_in_current_directory(self, tmp_path):
        write_config(tmp_path / ".cachet-gate.yaml", {"poll_interval": 5})
        assert load_config().poll_interval == 5

    def test_empty_file_gives_defaults(self, tmp_path):
        (tmp_path / ".cachet-gate.yaml").write_text("")
        config = load_config()
        assert config.sources == []
        assert config.max_wait is None

    def test_cached(self, tmp_path):
        write_config(tmp_path / ".cachet-gate.yaml", {"poll_interval": 5})
        first = load_config()
        write_config(tmp_path / ".cachet-gate.yaml", {"poll_interval": 7})
        assert load_config() is first
        clear_config_cache()
        assert load_config().poll_interval == 7

    def test_invalid_values_rejected(self, tmp_path):
        path = write_config(tmp_path / "bad.yaml", {"poll_interval": 0})
        with pytest.raises(ValidationError):
            load_config(path)


class TestGatingConfig:

    def test_build_registry(self):
        config = GatingConfig.model_validate({
            "sources": [{"base_url": "https://status.example.com"}],
            "refresh_interval": 1,
            "request_timeout": 2.5,
        })
        registry = config.build_registry()
        assert [s.base_url for s in registry.sources] == ["https://status.example.com"]
        assert registry.refresh_interval == MIN_REFRESH_INTERVAL
        assert registry.request_timeout == 2.5
        assert not registry.running

    def test_gate_options(self):
        options = GatingConfig(poll_interval=3, max_wait=30).gate_options(require_resources=False)
        assert options.poll_interval == 3
        assert options.max_wait == 30
        assert options.require_resources is False


class TestResolveConfig:

    def test_command_line_sources_replace_configured(self, tmp_path):
        write_config(tmp_path / ".cachet-gate.yaml", {
            "sources": [{"base_url": "https://configured.example.com"}],
            "max_wait": 60,
        })
        config = resolve_config(source_urls=["https://cli.example.com"], token="t", insecure=True)
        assert [s.base_url for s in config.sources] == ["https://cli.example.com"]
        assert config.sources[0].auth_token == "t"
        assert config.sources[0].insecure_tls is True
        assert config.max_wait == 60

    def test_defaults_without_file(self):
        config = resolve_config()
        assert config.sources == []
