"""Tests for settings loading."""

from template_migration.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.hubspot_api_base == "https://api.hubapi.com"
    assert settings.default_template_limit == 10
    assert settings.sfmc_root_folder == "Content Builder"
    assert settings.sfmc_target_folder == "HubSpot Templates"
    assert settings.use_supabase is False


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HUBSPOT_API_BASE", "http://hubspot.local/")
    monkeypatch.setenv("DEFAULT_TEMPLATE_LIMIT", "25")
    monkeypatch.setenv("HTTP_TIMEOUT", "5")
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "key")
    monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com, https://admin.example.com")

    settings = Settings.from_env(str(tmp_path / "missing.env"))

    assert settings.hubspot_api_base == "http://hubspot.local"
    assert settings.default_template_limit == 25
    assert settings.http_timeout == 5.0
    assert settings.use_supabase is True
    assert settings.cors_origins == ["https://app.example.com", "https://admin.example.com"]


def test_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.delenv("SFMC_TARGET_FOLDER", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("SFMC_TARGET_FOLDER=Migrated\n")

    settings = Settings.from_env(str(env_file))

    assert settings.sfmc_target_folder == "Migrated"
