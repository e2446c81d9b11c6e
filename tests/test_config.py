"""Settings tests."""

import pytest

from event_export.config import Settings, load_settings


def test_load_settings_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("DHIS2_URL", "https://dhis2.example.org")
    monkeypatch.setenv("DHIS2_USERNAME", "admin")
    monkeypatch.setenv("DHIS2_PASSWORD", "district")
    monkeypatch.setenv("DHIS2_TIMEOUT", "12.5")
    monkeypatch.setenv("EVENT_EXPORT_LOG_LEVEL", "DEBUG")

    settings = load_settings(env_file=tmp_path / "missing.env")

    assert settings.dhis2_url == "https://dhis2.example.org"
    assert settings.timeout_s == 12.5
    assert settings.log_level == "DEBUG"

    connection = settings.connection()
    assert connection.api_url == "https://dhis2.example.org/api"
    assert connection.username == "admin"
    assert connection.timeout_s == 12.5


def test_load_settings_reads_env_file(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("DHIS2_URL", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("DHIS2_URL=https://from-file.example.org\n")

    settings = load_settings(env_file=env_file)
    monkeypatch.delenv("DHIS2_URL", raising=False)

    assert settings.dhis2_url == "https://from-file.example.org"


def test_connection_without_url_is_an_error() -> None:
    with pytest.raises(ValueError, match="DHIS2_URL"):
        Settings().connection()
