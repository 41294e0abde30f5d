"""Tests for environment-driven settings."""

from archgraph.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.app_name == "archgraph"
    assert "node_modules" in settings.default_blacklist
    assert settings.alias_config_files == ["tsconfig.json", "jsconfig.json"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ARCHGRAPH_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ARCHGRAPH_DEFAULT_NEIGHBOR_DEPTH", "3")
    monkeypatch.setenv("ARCHGRAPH_SOURCE_EXTENSIONS", '[".ts"]')

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.default_neighbor_depth == 3
    assert settings.source_extensions == [".ts"]
