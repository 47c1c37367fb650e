"""Shared test fixtures."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from kidsjoy.settings.app_settings import reset_app_settings


@pytest.fixture(autouse=True)
def isolated_user_data(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep user data (catalog, cache, settings, logs) out of the real home directory."""
    data_dir = tmp_path / "kidsjoy-home"
    monkeypatch.setenv("KIDSJOY_HOME", str(data_dir))
    for name in ("GEMINI_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    reset_app_settings()
    yield data_dir
    reset_app_settings()
