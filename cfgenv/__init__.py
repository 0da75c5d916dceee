# cfgenv/__init__.py
"""
cfgenv – environment variable overrides for dataclass-based configuration.

Import `overlay` from `cfgenv.overlay`, the file readers from `cfgenv.loader`
and the exceptions from `cfgenv.exceptions`.

Modules:
    - ``cfgenv.schema``: static description of configuration classes
    - ``cfgenv.convert``: string to typed value conversion
    - ``cfgenv.overlay``: applies an environment map to a populated config
    - ``cfgenv.loader``: TOML/JSON binding plus read-then-overlay entry points
    - ``cfgenv.environ``: process environment and ``.env`` snapshots
    - ``cfgenv.kinds``: fixed-width numeric types and the ``from_text`` protocol
"""

__version__ = "0.1.0"
