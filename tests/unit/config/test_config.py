from core.config import AppSettings, write_user_env_vars


def test_defaults():
    settings = AppSettings(_env_file=None)
    assert settings.http_timeout_seconds == 15.0
    assert settings.admin_role_id == 1
    assert settings.log_level == "WARNING"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("GMSF_API_BASE_URL", "https://staging.example.com")
    monkeypatch.setenv("GMSF_ADMIN_ROLE_ID", "4")

    settings = AppSettings(_env_file=None)

    assert settings.api_base_url == "https://staging.example.com"
    assert settings.admin_role_id == 4


def test_credentials_path_override(tmp_path):
    settings = AppSettings(credentials_path=tmp_path / "s.json", _env_file=None)
    assert settings.resolved_credentials_path() == tmp_path / "s.json"


def test_write_user_env_vars_merges(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text("# comment\nGMSF_LOG_LEVEL=INFO\n", encoding="utf-8")

    write_user_env_vars({"GMSF_API_BASE_URL": "https://api.gym.test"}, env_path=env_path)

    text = env_path.read_text(encoding="utf-8")
    assert "GMSF_LOG_LEVEL=INFO" in text
    assert "GMSF_API_BASE_URL=https://api.gym.test" in text


def test_env_file_is_read(tmp_path):
    env_path = tmp_path / ".env"
    write_user_env_vars({"GMSF_HTTP_TIMEOUT_SECONDS": "3"}, env_path=env_path)

    settings = AppSettings(_env_file=env_path)

    assert settings.http_timeout_seconds == 3.0
