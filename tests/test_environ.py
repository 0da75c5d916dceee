# tests/test_environ.py
"""Tests for environment snapshots."""

import os

from cfgenv.environ import environ_map, map_from_environ


def test_map_from_environ():
    environ = [
        "APPNAME_SEC_FIELD=geese",
        "APPNAME_SEC_k1_FIELD=cats",
        "APPNAME_SEC_k1_OTHER_FIELD=zebras,elephants",
        # Something base64-encoded, which will have a trailing '='.
        "APPNAME_SEC_k1_KEY=f4Q8N6PFcZKi9EK8NfvRbDgeUMkHyw9mXkMK/kPEi5Q=",
        "EMPTY=",
    ]
    assert map_from_environ(environ) == {
        "APPNAME_SEC_FIELD": "geese",
        "APPNAME_SEC_k1_FIELD": "cats",
        "APPNAME_SEC_k1_OTHER_FIELD": "zebras,elephants",
        "APPNAME_SEC_k1_KEY": "f4Q8N6PFcZKi9EK8NfvRbDgeUMkHyw9mXkMK/kPEi5Q=",
        "EMPTY": "",
    }


def test_environ_map_is_a_snapshot(monkeypatch):
    monkeypatch.setenv("CFGENV_TEST_VAR", "one")
    env = environ_map()
    assert env["CFGENV_TEST_VAR"] == "one"
    env["CFGENV_TEST_VAR"] = "two"
    assert os.environ["CFGENV_TEST_VAR"] == "one"


def test_dotenv_does_not_override(monkeypatch, tmp_path):
    monkeypatch.setenv("CFGENV_SET", "process")
    monkeypatch.delenv("CFGENV_NEW", raising=False)
    dotenv = tmp_path / ".env"
    dotenv.write_text("CFGENV_SET=dotenv\nCFGENV_NEW=dotenv\n")
    env = environ_map(dotenv_path=str(dotenv), load_dotenv_file=True)
    assert env["CFGENV_SET"] == "process"
    assert env["CFGENV_NEW"] == "dotenv"
    assert "CFGENV_NEW" not in os.environ


def test_dotenv_found_in_cwd(monkeypatch, tmp_path):
    monkeypatch.delenv("CFGENV_NEW", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("CFGENV_NEW=found\n")
    assert environ_map(load_dotenv_file=True)["CFGENV_NEW"] == "found"


def test_dotenv_not_loaded_by_default(monkeypatch, tmp_path):
    monkeypatch.delenv("CFGENV_NEW", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("CFGENV_NEW=found\n")
    assert "CFGENV_NEW" not in environ_map()


def test_missing_dotenv(tmp_path):
    env = environ_map(dotenv_path=str(tmp_path / "missing.env"), load_dotenv_file=True)
    assert env == dict(os.environ)
