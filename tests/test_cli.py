"""
tests/test_cli.py -- main.py subcommands run against the in-process API.

The CLI's http session is the TestClient and its storage a
MemorySessionStorage, so nothing touches the network or the home directory.
"""

from __future__ import annotations

import pytest

import main as cli
from client.storage import MemorySessionStorage

API = ["--api-url", "http://testserver/api"]
REGISTER = API + [
    "register",
    "--full-name",
    "Ann Lee",
    "--email",
    "ann@x.com",
    "--username",
    "annlee",
    "--password",
    "secret1",
]


@pytest.fixture
def run(api_client):
    client, _ = api_client
    storage = MemorySessionStorage()

    def _run(argv: list[str]) -> int:
        return cli.main(argv, http=client, storage=storage)

    _run.storage = storage
    return _run


def test_register_then_me(run, capsys) -> None:
    assert run(REGISTER) == 0
    assert run.storage.get_token()
    assert run(API + ["me"]) == 0
    out = capsys.readouterr().out
    assert "User registered successfully" in out
    assert "Username: annlee" in out


def test_login_wrong_password(run, capsys) -> None:
    run(REGISTER)
    run(API + ["logout"])
    assert run(API + ["login", "annlee", "--password", "wrong"]) == 1
    assert "Invalid credentials" in capsys.readouterr().out


def test_login_refused_while_logged_in(run, capsys) -> None:
    run(REGISTER)
    assert run(API + ["login", "annlee", "--password", "secret1"]) == 1
    assert "Already logged in" in capsys.readouterr().out


def test_status_and_logout(run, capsys) -> None:
    assert run(API + ["status"]) == 1
    run(REGISTER)
    assert run(API + ["status"]) == 0
    assert run(API + ["logout"]) == 0
    assert run.storage.get_token() is None
    assert "Session stored for annlee" in capsys.readouterr().out


def test_me_with_rejected_token_clears_session(run, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli.time, "sleep", lambda _: None)
    run.storage.set_token("not.a.token")
    assert run(API + ["me"]) == 1
    assert run.storage.get_token() is None
    out = capsys.readouterr().out
    assert "Session expired. Please login again." in out
    assert "-> /login" in out


def test_no_command_prints_help(run) -> None:
    assert run(API) == 1
