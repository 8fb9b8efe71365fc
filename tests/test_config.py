from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir, write_user_env_vars
from core.domain.requests import CodeFormat


def test_defaults():
    settings = AppSettings()

    assert settings.api_url == "http://localhost:8081"
    assert settings.default_format is CodeFormat.YAML
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PIPELINE_CLIENT_API_URL", "https://cds.example.com/api")
    monkeypatch.setenv("PIPELINE_CLIENT_DEFAULT_FORMAT", "json")

    settings = AppSettings()

    assert settings.api_url == "https://cds.example.com/api"
    assert settings.default_format is CodeFormat.JSON


def test_invalid_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("PIPELINE_CLIENT_HTTP_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValidationError):
        AppSettings()


def test_user_config_dir_follows_xdg(tmp_path):
    assert get_user_config_dir() == tmp_path / "config" / "pipeline-client"


def test_write_user_env_vars_merges(tmp_path):
    env_path = tmp_path / "custom" / ".env"
    write_user_env_vars({"PIPELINE_CLIENT_API_URL": "http://a"}, env_path=env_path)
    write_user_env_vars({"PIPELINE_CLIENT_DEFAULT_FORMAT": "json", "IGNORED": None}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()

    assert lines[0].startswith("#")
    assert "PIPELINE_CLIENT_API_URL=http://a" in lines
    assert "PIPELINE_CLIENT_DEFAULT_FORMAT=json" in lines
    assert not any(line.startswith("IGNORED") for line in lines)


def test_project_env_file_is_read(tmp_path):
    Path(".env").write_text("PIPELINE_CLIENT_API_URL=http://from-dotenv:8081\n", encoding="utf-8")
    assert AppSettings().api_url == "http://from-dotenv:8081"
