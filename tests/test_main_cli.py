from __future__ import annotations

import getpass
import importlib.util
from pathlib import Path

import pytest

import main as cli
from main import _parse_args
from portal.config import Settings
from portal.database import InMemoryDocumentStore
from portal.errors import StorageError


ROOT = Path(__file__).resolve().parents[1]


def _load_create_user_script():
    spec = importlib.util.spec_from_file_location(
        "create_user_script", ROOT / "scripts" / "create_user.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class ClosingStore(InMemoryDocumentStore):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"
    assert args.host is None
    assert args.port is None


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_maintenance_subcommands_available() -> None:
    assert _parse_args(["init-db"]).command == "init-db"
    assert _parse_args(["contacts"]).command == "contacts"


@pytest.mark.parametrize("command", ["init-db", "contacts"])
def test_offline_commands_require_connection_string(monkeypatch, capsys, command: str) -> None:
    monkeypatch.setattr(cli, "load_settings", lambda: Settings())
    created = []
    monkeypatch.setattr(cli, "create_store", lambda settings: created.append(settings))

    assert cli.main([command]) == 1
    assert created == []
    assert "MONGODB_URI is not set" in capsys.readouterr().err


def test_contacts_command_lists_stored_messages(monkeypatch, capsys) -> None:
    store = ClosingStore()
    store.insert_contact("Ann", "ann@example.com", "Please call me back")
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(mongodb_uri="mongodb://db.test"))
    monkeypatch.setattr(cli, "create_store", lambda settings: store)

    assert cli.main(["contacts"]) == 0

    output = capsys.readouterr().out
    assert "1 contact message(s) found" in output
    assert "ann@example.com" in output
    assert store.closed


def test_init_db_reports_storage_failure(monkeypatch, capsys) -> None:
    class BrokenStore(ClosingStore):
        def ensure_indexes(self) -> None:
            raise StorageError("Failed to create indexes")

    store = BrokenStore()
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(mongodb_uri="mongodb://db.test"))
    monkeypatch.setattr(cli, "create_store", lambda settings: store)

    assert cli.main(["init-db"]) == 1
    assert "Failed to create indexes" in capsys.readouterr().err
    assert store.closed


def test_create_user_script_requires_connection_string(monkeypatch, capsys) -> None:
    script = _load_create_user_script()
    monkeypatch.setattr(script, "load_settings", lambda: Settings())

    def fail_prompt(_prompt: str = "") -> str:
        raise AssertionError("password should not be requested")

    monkeypatch.setattr(getpass, "getpass", fail_prompt)

    assert script.main(["Ada", "Lovelace", "ada@example.com"]) == 1
    assert "MONGODB_URI is not set" in capsys.readouterr().err


def test_create_user_script_registers_account(monkeypatch) -> None:
    script = _load_create_user_script()
    store = ClosingStore()
    monkeypatch.setattr(
        script,
        "load_settings",
        lambda: Settings(mongodb_uri="mongodb://db.test", bcrypt_rounds=4),
    )
    monkeypatch.setattr(script, "create_store", lambda settings: store)
    monkeypatch.setattr(getpass, "getpass", lambda _prompt="": "analytical")

    assert script.main(["Ada", "Lovelace", "ada@example.com"]) == 0

    user = store.find_user_by_email("ada@example.com")
    assert user is not None
    assert user.first_name == "Ada"
    assert user.password_hash != "analytical"
    assert store.closed
