"""
Repository-level pytest configuration.

Why this exists:
  - Provide safe defaults for local runs (public sample store, no secrets)
  - Keep retry waits and log output predictable across machines
  - Keep behavior explicit and discoverable

Important:
  Values below are only defaults. CI can override any of them through the
  environment before pytest starts.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """
    Set environment defaults if not already provided by the user/CI.

    Logs stay on the console so test runs never write into the repo tree.
    """
    defaults = {
        "UI_BASE_URL": "https://www.saucedemo.com",
        "LOG_LEVEL": "DEBUG",
        "LOG_FILE": "",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
