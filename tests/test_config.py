from pathlib import Path

import pytest

import config


@pytest.fixture
def cfg_path(tmp_path, monkeypatch):
    path = tmp_path / "todo_sync.yaml"
    monkeypatch.setattr(config, "USER_CONFIG_PATH", path)
    for name in (
        "TODO_SYNC_API_URL",
        "TODO_SYNC_UPLOAD_URL",
        "TODO_SYNC_DESTROY_URL",
        "TODO_SYNC_UPLOAD_PRESET",
        "TODO_SYNC_PROBE_URL",
        "TODO_SYNC_CACHE_DIR",
        "TODO_SYNC_TIMEOUT",
        "TODO_SYNC_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    return path


def test_user_and_token_roundtrip(cfg_path: Path):
    assert config.get_user_id() == ""
    config.set_user_id(" u1 ")
    config.set_user_token("tok")

    assert config.get_user_id() == "u1"
    assert config.get_user_token() == "tok"
    assert config.resolve_token() == "tok"

    config.set_user_id("")
    config.set_user_token("")
    assert not cfg_path.exists()


def test_auto_sync_defaults_on(cfg_path: Path):
    assert config.get_auto_sync() is True
    config.set_auto_sync(False)
    assert config.get_auto_sync() is False

    cfg_path.write_text("auto_sync: 'off'\n", encoding="utf-8")
    assert config.get_auto_sync() is False


def test_corrupt_config_is_ignored(cfg_path: Path):
    cfg_path.write_text(": [unbalanced", encoding="utf-8")
    assert config.get_user_id() == ""

    cfg_path.write_text("- a list\n", encoding="utf-8")
    assert config.get_auto_sync() is True


def test_settings_from_file_and_env(cfg_path: Path, tmp_path: Path, monkeypatch):
    cfg_path.write_text(
        "api_url: https://api.example/v1\n"
        "upload_url: https://uploads.example/upload\n"
        "upload_preset: preset\n"
        "timeout: 12\n"
        "watch_interval: 5\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TODO_SYNC_API_URL", "https://override.example")
    monkeypatch.setenv("TODO_SYNC_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("TODO_SYNC_TOKEN", "env-token")

    settings = config.load_settings()

    assert settings.api_url == "https://override.example"
    assert settings.upload_url == "https://uploads.example/upload"
    assert settings.upload_preset == "preset"
    assert settings.destroy_url == ""
    assert settings.probe_url == config.DEFAULT_PROBE_URL
    assert settings.cache_dir == tmp_path / "cache"
    assert settings.timeout == 12.0
    assert settings.watch_interval == 5.0
    assert config.resolve_token() == "env-token"


def test_bad_timeout_falls_back(cfg_path: Path, monkeypatch):
    monkeypatch.setenv("TODO_SYNC_TIMEOUT", "soon")
    assert config.load_settings().timeout == config.DEFAULT_TIMEOUT
