# tests/test_cli.py
"""Tests for the cfgenv command line interface."""

import json

import pytest
from click.testing import CliRunner

from cfgenv.cli import cli

SCHEMA = "sample_config:AppConfig"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cfg_file(tmp_path):
    path = tmp_path / "app.toml"
    path.write_text('[server]\nhost = "localhost"\ntags = ["a"]\n\n[upstream.eu]\nhost = "eu.example.com"\n')
    return str(path)


def test_dump(runner, cfg_file):
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", cfg_file, "-p", "APP", "dump"],
                           env={"APP_SERVER_TAGS": "b", "APP_UPSTREAM_us_PORT": "8443"})
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["server"]["host"] == "localhost"
    assert data["server"]["tags"] == ["a", "b"]
    assert data["upstream"]["us"]["port"] == 8443
    assert data["upstream"]["us"]["tags"] == ["base"]


def test_get(runner, cfg_file):
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", cfg_file, "get", "upstream.eu.host"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == "eu.example.com"


def test_get_missing_key(runner, cfg_file):
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", cfg_file, "get", "upstream.nope.host"])
    assert result.exit_code == 1
    assert "Key not found" in result.output


def test_keys(runner):
    result = runner.invoke(cli, ["-s", SCHEMA, "-p", "APP", "keys"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "APP_SERVER_HOST" in lines
    assert "APP_UPSTREAM_<name>_PORT" in lines
    assert "APP_VERSION" not in lines


def test_bad_schema(runner):
    result = runner.invoke(cli, ["-s", "sample_config:Nope", "keys"])
    assert result.exit_code == 2
    assert "cannot load" in result.output


def test_conversion_error(runner, cfg_file):
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", cfg_file, "dump"], env={"SERVER_PORT": "70000"})
    assert result.exit_code == 1
    assert "integer overflow" in result.output


def test_parse_error(runner, tmp_path):
    bad = tmp_path / "bad.toml"
    bad.write_text("[server\n")
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", str(bad), "dump"])
    assert result.exit_code == 1
    assert "Parse error" in result.output


def test_warning_continues(runner, tmp_path):
    extra = tmp_path / "extra.toml"
    extra.write_text('[server]\nhost = "h"\nnope = 1\n')
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", str(extra), "get", "server.host"])
    assert result.exit_code == 0
    assert "invalid variable: server.nope" in result.output


def test_warning_strict(runner, tmp_path):
    extra = tmp_path / "extra.toml"
    extra.write_text('[server]\nhost = "h"\nnope = 1\n')
    result = runner.invoke(cli, ["-s", SCHEMA, "-c", str(extra), "--strict", "dump"])
    assert result.exit_code == 1
