"""
Shared test configuration.

Every test runs against an isolated config file and with no DRIVEGATE_*
variables inherited from the developer's shell.
"""

import os
import pytest

from drivegate.sdk.config import ENV_OVERRIDES


@pytest.fixture(autouse=True)
def isolated_config_file(tmp_path, monkeypatch):
    """Point the config loader at an empty temp file location."""
    config_file = tmp_path / "config" / "config.yaml"
    monkeypatch.setenv("DRIVEGATE_CONFIG_FILE", str(config_file))
    monkeypatch.delenv("DRIVEGATE_CONFIG_DIR", raising=False)
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    return config_file


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as needing real Drive credentials"
    )
