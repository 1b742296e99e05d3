import json

import pytest

from gatorfeed.cli import build_commands, main


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    document = {"db_url": str(tmp_path / "gator.db"), "current_user_name": ""}
    (tmp_path / ".gatorconfig.json").write_text(json.dumps(document), encoding="utf-8")
    return tmp_path


def test_build_commands_help(capsys):
    build_commands().help()
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 11
    assert lines[0] == "login: Login"
    assert "browse: Browse posts in following feed" in lines
    assert "following: List user's following feeds" in lines


def test_main_without_arguments(home, capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_help(home, capsys):
    assert main(["help"]) == 0
    assert "reset: Reset database" in capsys.readouterr().out.splitlines()


def test_main_register_then_users(home, capsys):
    assert main(["register", "alice"]) == 0
    saved = json.loads((home / ".gatorconfig.json").read_text(encoding="utf-8"))
    assert saved["current_user_name"] == "alice"
    capsys.readouterr()
    assert main(["users"]) == 0
    assert capsys.readouterr().out == "* alice (current)\n"


def test_main_unknown_command(home, capsys):
    assert main(["bogus"]) == 1
    assert "Command 'bogus' not registered" in capsys.readouterr().err


def test_main_logged_in_command_without_user(home):
    assert main(["following"]) == 1


def test_main_handler_error(home, capsys):
    assert main(["login"]) == 1
    assert "Expect a single argument, the username." in capsys.readouterr().err


def test_main_missing_config(home):
    (home / ".gatorconfig.json").unlink()
    assert main(["users"]) == 1