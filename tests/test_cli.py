import json

import pytest

import config
from interface import cli_commands
from interface.todo_app import main


@pytest.fixture
def cli(env, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "USER_CONFIG_PATH", tmp_path / "todo_sync.yaml")
    monkeypatch.setattr(cli_commands, "get_engine", lambda: env.engine)
    config.set_user_id("u1")
    return env


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, json.loads(out)


def test_add_online_and_offline(cli, capsys):
    code, body = _run(capsys, "add", "Buy milk", "-d", "2 litres")
    assert code == 0
    assert body["message"] == "Task created"
    assert body["payload"]["task"]["id"] == "r1"
    assert body["payload"]["task"]["description"] == "2 litres"

    cli.go_offline()
    code, body = _run(capsys, "add", "Walk dog")
    assert code == 0
    assert body["message"] == "Task saved offline, will sync later"
    assert body["payload"]["task"]["id"].startswith("local_")
    assert body["payload"]["task"]["pendingSync"] is True


def test_add_rejects_short_title(cli, capsys):
    code, body = _run(capsys, "add", "ab")
    assert code == 1
    assert body["status"] == "ERROR"
    assert cli.remote.calls == []


def test_commands_require_login(cli, capsys):
    config.set_user_id("")
    code, body = _run(capsys, "list")
    assert code == 1
    assert "Not logged in" in body["message"]


def test_list_pending_filter(cli, capsys):
    _run(capsys, "add", "Synced task")
    cli.go_offline()
    _run(capsys, "add", "Offline task")

    code, body = _run(capsys, "list", "--pending")

    assert code == 0
    assert body["payload"]["online"] is False
    assert [t["title"] for t in body["payload"]["tasks"]] == ["Offline task"]


def test_sync_offline_success_and_failure(cli, capsys):
    cli.go_offline()
    _run(capsys, "add", "Buy milk")
    code, body = _run(capsys, "sync")
    assert code == 1
    assert body["status"] == "OFFLINE"

    cli.go_online()
    cli.remote.fail_ops.add("create")
    code, body = _run(capsys, "sync")
    assert code == 1
    assert body["status"] == "ERROR"
    assert len(body["payload"]["report"]["failed"]) == 1

    cli.remote.fail_ops.clear()
    code, body = _run(capsys, "sync")
    assert code == 0
    assert body["message"] == "Your tasks have been synced"
    assert list(body["payload"]["report"]["remapped"].values()) == ["r1"]


def test_show_update_delete(cli, capsys):
    _run(capsys, "add", "Buy milk")

    code, body = _run(capsys, "update", "r1", "--done", "--title", "Buy oat milk")
    assert code == 0
    assert body["payload"]["task"]["completed"] is True
    assert cli.remote.records["r1"]["title"] == "Buy oat milk"

    code, body = _run(capsys, "show", "r1")
    assert body["payload"]["task"]["title"] == "Buy oat milk"

    code, body = _run(capsys, "update", "r1")
    assert code == 1

    code, body = _run(capsys, "delete", "r1")
    assert code == 0
    assert body["payload"]["remaining"] == 0
    assert "r1" not in cli.remote.records

    code, body = _run(capsys, "show", "r1")
    assert code == 1


def test_status_and_clear_cache(cli, capsys):
    cli.go_offline()
    _run(capsys, "add", "Buy milk")

    code, body = _run(capsys, "status")
    payload = body["payload"]
    assert payload["user"] == "u1"
    assert payload["online"] is False
    assert payload["pending"] == 1
    assert payload["auto_sync"] is True
    assert payload["stats"]["total"] == 1
    assert payload["last_sync"]

    code, body = _run(capsys, "clear-cache")
    assert code == 0
    assert cli.cache.load("u1") == []


def test_login_logout_autosync(cli, capsys):
    code, body = _run(capsys, "login", "--user", "u7", "--token", "secret")
    assert code == 0
    assert body["payload"]["token"] == "***"
    assert config.get_user_id() == "u7"
    assert config.get_user_token() == "secret"

    _run(capsys, "autosync", "off")
    assert config.get_auto_sync() is False

    _run(capsys, "logout")
    assert config.get_user_id() == ""
    assert config.get_user_token() == ""


def test_no_command_prints_help(cli, capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().out
