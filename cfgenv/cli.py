# cfgenv/cli.py

import importlib
import json
import click

from .environ import environ_map
from .exceptions import CfgenvError, ConfigParseError, ConfigWarning
from .loader import read_files_with_env_into
from .schema import env_keys, schema_for, zero_record
from .utils import as_dict, get_by_dot


def _import_schema(spec: str) -> type:
    """Resolve ``package.module:ClassName`` to a configuration class."""
    if ":" not in spec:
        raise click.BadParameter("expected 'module:ClassName'", param_hint="--schema")
    module_name, _, attr = spec.partition(":")
    try:
        config_type = getattr(importlib.import_module(module_name), attr)
        schema_for(config_type)
    except (ImportError, AttributeError, TypeError) as e:
        raise click.BadParameter(f"cannot load {spec!r}: {e}", param_hint="--schema") from e
    return config_type


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-s", "--schema",    "schema_spec", required=True,
              help="Configuration class, as module:ClassName")
@click.option("-c", "--config",    "file_paths", multiple=True,
              help="JSON/TOML file to load (repeatable, later wins)")
@click.option("-p", "--prefix",    default="", help="Env-var prefix for overrides")
@click.option("--dotenv",          "dotenv_path", help="Path to a .env file")
@click.option("--strict",          is_flag=True, help="Treat ignored config content as an error")
@click.pass_context
def cli(ctx, schema_spec, file_paths, prefix, dotenv_path, strict):
    """
    cfgenv CLI: load a config class from files, apply env-var overrides, inspect it.

    Subcommands:
      • dump
      • get       KEY
      • keys
    """
    config_type = _import_schema(schema_spec)
    ctx.obj = {"config_type": config_type, "prefix": prefix}
    if ctx.invoked_subcommand == "keys":
        return

    cfg = zero_record(config_type)
    env = environ_map(dotenv_path=dotenv_path, load_dotenv_file=dotenv_path is not None)
    try:
        read_files_with_env_into(file_paths, prefix, cfg, env=env)
    except ConfigWarning as w:
        color = "red" if strict else "yellow"
        for msg in w.messages:
            click.secho(f"Warning: {msg}", fg=color, err=True)
        if strict:
            ctx.exit(1)
    except (CfgenvError, FileNotFoundError) as e:
        label = "Parse error" if isinstance(e, ConfigParseError) else "Error"
        click.secho(f"{label}: {e}", fg="red", err=True)
        ctx.exit(1)

    ctx.obj["cfg"] = cfg


@cli.command()
@click.pass_context
def dump(ctx):
    """Pretty-print the entire config as JSON."""
    click.echo(json.dumps(as_dict(ctx.obj["cfg"]), indent=2, default=str))


@cli.command()
@click.argument("key")
@click.pass_context
def get(ctx, key):
    """Print the value of KEY (dot-notation, e.g. upstream.eu.host) as JSON."""
    try:
        val = get_by_dot(as_dict(ctx.obj["cfg"]), key)
    except KeyError:
        click.secho(f"Key not found: {key}", fg="yellow", err=True)
        ctx.exit(1)
    click.echo(json.dumps(val, indent=2, default=str))


@cli.command()
@click.pass_context
def keys(ctx):
    """List the environment variables the config class recognises."""
    for key in env_keys(ctx.obj["config_type"], ctx.obj["prefix"]):
        click.echo(key)
