"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from plugkit.config.load import CONFIG_ENV_VAR, clear_configuration_cache, load_plugin_config
from plugkit.config.schema import PluginConfig


@pytest.fixture(autouse=True)
def _isolated_configuration(monkeypatch: pytest.MonkeyPatch):
    """Every test starts without a cached catalog or a catalog env var."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    clear_configuration_cache()
    yield
    clear_configuration_cache()


@pytest.fixture
def fixture_config_path() -> Path:
    """Path to the demo plugin catalog."""
    return Path(__file__).parent / "fixtures" / "config.json"


@pytest.fixture
def fixture_config(fixture_config_path: Path) -> PluginConfig:
    """Load the demo plugin catalog."""
    return load_plugin_config(fixture_config_path)
