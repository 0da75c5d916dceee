# cfgenv/environ.py
"""
cfgenv.environ
--------------

Builds the environment map an overlay pass reads from.

Keys are taken verbatim; no case folding or other normalization happens here.
"""

import logging
import os
from typing import Dict, Iterable, Optional

from dotenv import dotenv_values, find_dotenv

log = logging.getLogger(__name__)


def map_from_environ(environ: Iterable[str]) -> Dict[str, str]:
    """
    Turn ``NAME=value`` strings into a dictionary.

    Only the first ``=`` separates name and value, so values such as base64
    text keep their trailing ``=``. An entry without ``=`` maps to ``""``.
    """
    out = {}
    for entry in environ:
        name, _, value = entry.partition("=")
        out[name] = value
    return out


def environ_map(dotenv_path: Optional[str] = None, load_dotenv_file: bool = False) -> Dict[str, str]:
    """
    Snapshot the process environment, optionally completed by a ``.env`` file.

    Variables from the ``.env`` file never override variables already present
    in the environment. ``os.environ`` itself is left untouched.

    Args:
        dotenv_path: Explicit ``.env`` path. Without it, ``find_dotenv`` searches
                     the working directory and its parents.
        load_dotenv_file: Whether to read a ``.env`` file at all.
    """
    env = dict(os.environ)
    if not load_dotenv_file:
        return env

    actual_dotenv_path = dotenv_path or find_dotenv(usecwd=True)
    if not actual_dotenv_path or not os.path.exists(actual_dotenv_path):
        log.debug(f"DEBUG [cfgenv.environ_map]: No .env file found to load (searched path: {dotenv_path or 'auto'}).")
        return env

    added = 0
    for name, value in dotenv_values(actual_dotenv_path).items():
        # Keys without a value (a bare "NAME" line) come back as None.
        if value is None or name in env:
            continue
        env[name] = value
        added += 1
    log.debug(f"DEBUG [cfgenv.environ_map]: Loaded {added} variables from .env file at {actual_dotenv_path}.")
    return env
