"""Unit tests for application settings configuration."""

from pathlib import Path

from domainsync.config import Settings


def test_settings_uses_project_env_file_independent_of_cwd():
    """Settings should always include the project-level .env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_project_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_project_env in normalized
    assert str(Path(".env")) in normalized


def test_registrar_configured_requires_both_credentials(monkeypatch):
    monkeypatch.delenv("SW_RESELLER_ID", raising=False)
    monkeypatch.delenv("SW_API_KEY", raising=False)

    assert Settings(_env_file=None, sw_reseller_id="1234", sw_api_key="").registrar_configured is False
    assert Settings(_env_file=None, sw_reseller_id=" ", sw_api_key="key").registrar_configured is False
    assert Settings(_env_file=None, sw_reseller_id="1234", sw_api_key="key").registrar_configured is True


def test_settings_read_registrar_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("SW_RESELLER_ID", "5678")
    monkeypatch.setenv("SW_API_KEY", "env-key")
    monkeypatch.setenv("SW_TIMEOUT_SECONDS", "12.5")

    settings = Settings(_env_file=None)

    assert settings.sw_reseller_id == "5678"
    assert settings.sw_api_key == "env-key"
    assert settings.sw_timeout_seconds == 12.5
