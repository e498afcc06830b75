import pytest

from masterplan import bootstrap


@pytest.fixture(scope="session", autouse=True)
def setup_masterplan() -> None:
    """Bootstrap built-in loaders once for the entire test session."""

    bootstrap()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path) -> None:
    """Keep the real home directory and plugin settings out of every test."""

    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("MASTERPLAN_PLUGINS", raising=False)
