# cfgenv/utils.py
"""
cfgenv.utils
------------

Shared utility functions for path handling and inspecting loaded configs.
Used internally by cfgenv and available for downstream consumers.
"""

import dataclasses
import os
from typing import Any, Mapping, Optional


def expand_path(path: Optional[str]) -> Optional[str]:
    """Expand ~ and environment variables in a path string.

    Handles both user home directory expansion (~) and environment
    variable expansion ($VAR, ${VAR}).

    Args:
        path: Path string to expand, or None.

    Returns:
        Expanded path string, or None if input was None.

    Examples:
        >>> expand_path("~/configs/app.toml")
        '/home/user/configs/app.toml'
        >>> expand_path(None)
        None
    """
    if path is None:
        return None
    return os.path.expandvars(os.path.expanduser(path))


def as_dict(config: Any) -> dict:
    """Return a configuration dataclass as plain, JSON-friendly data.

    Values of custom types (e.g. ``from_text`` implementations) are kept as-is;
    serialize them with ``default=str``.
    """
    return dataclasses.asdict(config)


def get_by_dot(data: Mapping, key: str) -> Any:
    """
    Retrieve a nested value from a mapping using a dot-notated key.

    Subsection names may themselves be empty: ``"upstream..host"`` reads the
    unnamed subsection of ``upstream``.

    Raises:
        KeyError: If any part of the key path does not exist.
    """
    d = data
    current_path_parts = []
    for p in key.split('.'):
        if not isinstance(d, Mapping) or p not in d:
            found_path = '.'.join(current_path_parts)
            raise KeyError(f"Key path '{key}' not found (missing part: '{p}' at path '{found_path}')")
        current_path_parts.append(p)
        d = d[p]
    return d
