import pytest

from filmacademy.core.config import Settings, settings


def test_settings_are_test_environment():
    assert settings.environment == "test"
    assert settings.log_dir is None
    assert settings.database_url == settings.get_database_url(use_test=True)


def test_academy_defaults():
    assert settings.COURSE_COMPLETION_THRESHOLD == 95
    assert settings.DEFAULT_PASSING_SCORE == 70
    assert settings.CERTIFICATE_PREFIX == "FFA"
    assert settings.CERTIFICATE_AUTO_ISSUE is True


def test_cors_origins_are_split(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://academy.example.com, https://studio.example.com,")
    refreshed = Settings()
    assert refreshed.allowed_origins == [
        "https://academy.example.com",
        "https://studio.example.com",
    ]


def test_cors_default_allowlist(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    refreshed = Settings()
    assert "http://localhost:5173" in refreshed.allowed_origins


def test_database_url_falls_back_to_sqlite(monkeypatch):
    refreshed = Settings(database_url=None)
    assert refreshed.get_database_url().startswith("sqlite:///")


def test_test_database_url_must_be_dedicated():
    refreshed = Settings(test_database_url="postgresql://user:pw@localhost/academy")
    with pytest.raises(ValueError):
        refreshed.get_database_url(use_test=True)


def test_test_database_url_accepts_test_suffix():
    url = "postgresql://user:pw@localhost/academy_test"
    refreshed = Settings(test_database_url=url)
    assert refreshed.get_database_url(use_test=True) == url


def test_settings_expose_only_consumed_site_keys():
    assert settings.SITE_NAME == "Film Academy"
    assert "BASE_URL" not in Settings.model_fields
