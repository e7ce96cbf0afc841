"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from mailhog_server.bootstrap import Config, configure
from mailhog_server.config import Settings
from mailhog_server.main import create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Ensure MH_* variables and a local .env never leak into tests."""
    for var in list(os.environ):
        if var.upper().startswith("MH_"):
            monkeypatch.delenv(var, raising=False)

    # Relative default paths (./mailhog-data) resolve inside the test dir
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Factory for Settings isolated to tmp_path, defaulting to memory storage."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "storage": "memory",
            "maildir_path": str(tmp_path / "maildir"),
            "jim_state_file": str(tmp_path / "state" / "jim.json"),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def config(make_settings: Callable[..., Settings]) -> Config:
    """Bootstrapped config on in-memory storage with Jim not invited."""
    return configure(make_settings())


@pytest.fixture
def client(config: Config) -> TestClient:
    """Create test client."""
    return TestClient(create_app(config))
