from __future__ import annotations

import pytest

from minicrud.core import config as core_config
from minicrud.core import rate_limiter


@pytest.fixture()
def data_env(tmp_path, monkeypatch):
    """Point DATA_DIR at a temporary folder and reset cached settings/limits."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.delenv("USERS_FILE", raising=False)
    monkeypatch.delenv("RECORDS_FILE", raising=False)
    monkeypatch.setenv("LOCK_TIMEOUT_SECONDS", "10")
    core_config.get_settings.cache_clear()
    rate_limiter.reset_limits()

    yield tmp_path

    core_config.get_settings.cache_clear()
    rate_limiter.reset_limits()
