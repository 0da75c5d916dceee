# cfgenv/loader.py
"""
cfgenv.loader
-------------

Populates configuration dataclasses from JSON/TOML files and then applies
environment variable overrides (see ``cfgenv.overlay``).

Binding rules:
    - Section and variable names match case-insensitively, ``-`` and ``_``
      being equivalent. A ``cfg`` name override in a field's metadata is used
      instead of the attribute name.
    - For a dynamic section, nested tables are named subsections and plain keys
      belong to the unnamed subsection ``""``::

          [upstream]
          host = "fallback"       # upstream[""].host

          [upstream.eu]
          host = "eu.example.com" # upstream["eu"].host

      Subsections created from a file are seeded from the default record.
    - String values go through the value converter; native TOML/JSON values
      are accepted when they fit the field's type. File lists replace values.

Errors:
    - ``ConfigParseError`` (fatal): undecodable data, a section that is not a
      table, an invalid value for a known field. Overrides are not applied.
    - ``ConfigWarning`` (non-fatal): unknown sections or variables. Everything
      else was bound and overrides are applied before the warning is raised.

Requires Python 3.10+.
"""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional

# Use tomli for reading TOML (works for Python 3.10+)
try:
    import tomli
except ImportError:
    try: import tomllib as tomli # Python 3.11+
    except ImportError: tomli = None

from .convert import convert
from .environ import environ_map
from .exceptions import ConfigParseError, ConfigWarning, ConversionError, FloatOverflow
from .kinds import int_bounds
from .overlay import new_subsection, overlay
from .schema import FieldSpec, Parsable, Pointer, Scalar, SectionSpec, Sequence, TypeSpec, schema_for, zero_record
from .utils import expand_path

log = logging.getLogger(__name__) # Logger for cfgenv loader

UTF8_BOM = "\ufeff"
FORMATS = {".toml": "toml", ".json": "json"}

# --- Decoding ---


def load_data(text: str, fmt: str = "toml", path: Optional[str] = None) -> dict:
    """
    Decode TOML or JSON text into a dictionary.

    A leading UTF-8 byte-order mark is ignored.

    Raises:
        ConfigParseError: If the text cannot be decoded or ``fmt`` is unknown.
    """
    if text.startswith(UTF8_BOM):
        text = text[len(UTF8_BOM):]
    try:
        if fmt == "toml":
            if not tomli: raise ConfigParseError("tomli (or tomllib) is required for TOML support.", path)
            data = tomli.loads(text)
        elif fmt == "json":
            data = json.loads(text) if text.strip() else {}
        else:
            raise ConfigParseError(f"Unsupported config format: {fmt}", path)
    except ConfigParseError:
        raise
    except (ValueError, TypeError) as e:
        # TOMLDecodeError and JSONDecodeError are both ValueErrors.
        raise ConfigParseError(f"Error parsing {fmt.upper()} data: {e}", path) from e
    if not isinstance(data, dict):
        raise ConfigParseError(f"Top-level {fmt.upper()} value must be a table, got {type(data).__name__}", path)
    return data


def load_file(file_path: str) -> dict:
    """
    Load and decode a ``.toml`` or ``.json`` file. ``~`` and ``$VARS`` are expanded.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigParseError: If the file type is unsupported or its content invalid.
    """
    file_path = expand_path(file_path)
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Config file not found: {file_path}")

    ext = os.path.splitext(file_path)[1].lower()
    if ext not in FORMATS:
        raise ConfigParseError(f"Unsupported config file type: {ext}", file_path)
    try:
        with open(file_path, mode='r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"File is not valid UTF-8: {e}", file_path) from e
    log.debug(f"DEBUG [cfgenv.load_file]: Read {len(text)} characters from {file_path}.")
    return load_data(text, FORMATS[ext], path=file_path)


# --- Binding ---


def _normalize(name: str) -> str:
    return name.replace("-", "_").upper()


def _coerce(spec: TypeSpec, value: Any) -> Any:
    """Convert a decoded TOML/JSON value to a field's type."""
    if isinstance(value, str):
        return convert(spec, value)
    if isinstance(spec, Pointer):
        return _coerce(spec.inner, value)
    if isinstance(spec, Parsable):
        return convert(spec, str(value))
    if isinstance(spec, Sequence):
        if not isinstance(value, list):
            value = [value]
        return [_coerce(spec.element, item) for item in value]
    if isinstance(spec, Scalar):
        if spec.kind == "bool" and isinstance(value, bool):
            return value
        if spec.kind == "int" and isinstance(value, int) and not isinstance(value, bool):
            lo, hi = int_bounds(spec.py_type)
            if lo <= value <= hi:
                return value if spec.py_type is int else spec.py_type(value)
            return convert(spec, str(value))  # raises IntegerOverflow
        if spec.kind == "float" and isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                number = float(value)
            except OverflowError:
                raise FloatOverflow(spec.name, str(value)) from None
            return convert(spec, repr(number))
    raise ConversionError(f"invalid value {value!r} for {spec.name}", spec.name)


class _Binder:
    """Binds one decoded document into a configuration object."""

    def __init__(self, config: Any, path: Optional[str] = None):
        self.config = config
        self.path = path
        self.schema = schema_for(type(config))
        self.sections = {_normalize(s.env_name): s for s in self.schema.sections if s.exported}
        self.warnings: List[str] = []

    def bind(self, data: Mapping[str, Any]) -> None:
        for sec_key, sec_data in data.items():
            section = self.sections.get(_normalize(sec_key))
            if section is None:
                if isinstance(sec_data, dict):
                    self.warnings.append(f"invalid section: {sec_key!r}")
                else:
                    self.warnings.append(f"variable {sec_key!r} is outside any section")
                continue
            if not isinstance(sec_data, dict):
                raise ConfigParseError(f"section {sec_key!r} must be a table", self.path)
            if section.dynamic:
                self._bind_dynamic(section, sec_key, sec_data)
            else:
                record = getattr(self.config, section.attr)
                if record is None:
                    record = zero_record(section.record_type)
                    setattr(self.config, section.attr, record)
                self._bind_record(section, record, sec_key, sec_data)

    def _bind_dynamic(self, section: SectionSpec, sec_key: str, sec_data: Mapping[str, Any]) -> None:
        unnamed = {k: v for k, v in sec_data.items() if not isinstance(v, dict)}
        named = {k: v for k, v in sec_data.items() if isinstance(v, dict)}
        if unnamed:
            named = {"": unnamed, **named}
        for name, values in named.items():
            subsections = getattr(self.config, section.attr)
            if subsections is None:
                subsections = {}
                setattr(self.config, section.attr, subsections)
            record = subsections.get(name)
            if record is None:
                record = new_subsection(self.config, section)
                subsections[name] = record
            label = f"{sec_key}.{name}" if name else sec_key
            self._bind_record(section, record, label, values)

    def _bind_record(self, section: SectionSpec, record: Any, label: str, values: Mapping[str, Any]) -> None:
        fields: Dict[str, FieldSpec] = {_normalize(f.env_name): f for f in section.exported_fields()}
        for key, value in values.items():
            field = fields.get(_normalize(key))
            if field is None:
                self.warnings.append(f"invalid variable: {label}.{key}")
                continue
            try:
                setattr(record, field.attr, _coerce(field.type, value))
            except ConversionError as e:
                raise ConfigParseError(f"invalid value for {label}.{key}: {e}", self.path) from e


def read_into(config: Any, data: Mapping[str, Any], path: Optional[str] = None) -> None:
    """
    Bind decoded configuration ``data`` into ``config`` in place.

    Raises:
        ConfigParseError: On the first fatal problem; ``config`` may be partly bound.
        ConfigWarning: After binding, if anything was ignored.
    """
    binder = _Binder(config, path)
    binder.bind(data)
    if binder.warnings:
        for msg in binder.warnings:
            log.warning(f"Warning: {path or '<data>'}: {msg}")
        raise ConfigWarning(binder.warnings)


def read_string_into(config: Any, text: str, fmt: str = "toml") -> None:
    """Decode ``text`` and bind it into ``config``. See ``read_into``."""
    read_into(config, load_data(text, fmt))


def read_files_into(config: Any, file_paths: Iterable[str]) -> None:
    """
    Bind several files into ``config`` in order; later files win.

    Warnings from every file are combined into a single ``ConfigWarning``.
    """
    messages: List[str] = []
    for file_path in file_paths:
        try:
            read_into(config, load_file(file_path), path=file_path)
        except ConfigWarning as w:
            messages.extend(f"{file_path}: {m}" for m in w.messages)
    if messages:
        raise ConfigWarning(messages)


# --- Read + Overlay ---


def _with_overlay(read, config: Any, prefix: str, env: Mapping[str, str]) -> None:
    """
    Run ``read`` then overlay ``env``.

    A fatal read error propagates before any override is applied. A read warning
    is held back until the overlay succeeded; an overlay error takes precedence.
    """
    warning = None
    try:
        read()
    except ConfigWarning as w:
        warning = w
    overlay(config, prefix, env)
    if warning is not None:
        raise warning


def read_with_map_into(text: str, env: Mapping[str, str], prefix: str, config: Any, fmt: str = "toml") -> None:
    """Parse ``text`` into ``config`` and overlay the given environment map."""
    _with_overlay(lambda: read_string_into(config, text, fmt), config, prefix, env)


def read_with_env_into(text: str, prefix: str, config: Any, fmt: str = "toml",
                       dotenv_path: Optional[str] = None) -> None:
    """
    Parse ``text`` into ``config`` and overlay the process environment.

    If ``dotenv_path`` is given, that ``.env`` file supplies variables not
    already set in the environment.
    """
    env = environ_map(dotenv_path=dotenv_path, load_dotenv_file=dotenv_path is not None)
    read_with_map_into(text, env, prefix, config, fmt)


def read_file_with_env_into(file_path: str, prefix: str, config: Any,
                            env: Optional[Mapping[str, str]] = None) -> None:
    """
    Load ``file_path`` into ``config`` and overlay ``env`` (default: process environment).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigParseError: If the file is invalid; no override is applied.
        ConversionError: If an override value is invalid.
        ConfigWarning: If the file had ignored content and overrides succeeded.
    """
    read_files_with_env_into([file_path], prefix, config, env)


def read_files_with_env_into(file_paths: Iterable[str], prefix: str, config: Any,
                             env: Optional[Mapping[str, str]] = None) -> None:
    """Like ``read_file_with_env_into`` for several files, applied in order."""
    if env is None:
        env = environ_map()
    paths = list(file_paths)
    _with_overlay(lambda: read_files_into(config, paths), config, prefix, env)

