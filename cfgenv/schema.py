# cfgenv/schema.py
"""
cfgenv.schema
-------------

Static description of a configuration class.

A configuration class is a dataclass whose fields are *sections*:

- a dataclass-typed field is a flat section;
- a ``Dict[str, Record]`` (or ``Optional[Dict[str, Record]]``) field is a
  dynamic section, i.e. a mapping of subsection name to record. A root field
  named ``default_<section>`` with the record type seeds new subsections.

Any other root field is not a section. The schema is built once per class and
cached; the overlay walker and the base parser only look at the schema, never at
``typing`` internals.
"""

import dataclasses
import functools
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .kinds import FixedInt, Float32, is_text_parsable

log = logging.getLogger(__name__)

# dataclasses.field(metadata={NAME_KEY: "other-name"}) overrides a derived name.
NAME_KEY = "cfg"
DEFAULT_PREFIX = "default_"

# --- Type Descriptors ---


@dataclass(frozen=True)
class TypeSpec:
    """Descriptor of a field's value type."""

    py_type: Any

    @property
    def name(self) -> str:
        return type_name(self.py_type)


@dataclass(frozen=True)
class Scalar(TypeSpec):
    """``str``, ``bool``, integers and floats (and their subclasses)."""

    kind: str = "str"  # one of "str", "bool", "int", "float"


@dataclass(frozen=True)
class Parsable(TypeSpec):
    """A class exposing ``from_text``."""


@dataclass(frozen=True)
class Pointer(TypeSpec):
    """``Optional[T]``: the value may be ``None``."""

    inner: Optional[TypeSpec] = None


@dataclass(frozen=True)
class Sequence(TypeSpec):
    """``List[T]``."""

    element: Optional[TypeSpec] = None


@dataclass(frozen=True)
class Unsupported(TypeSpec):
    """Anything the converter has no rule for."""


def type_name(tp: Any) -> str:
    if isinstance(tp, type):
        if issubclass(tp, (FixedInt, Float32)):
            return tp.__name__.lower()
        return tp.__name__
    return str(tp).replace("typing.", "")


def _optional_arg(tp: Any) -> Any:
    """Return ``T`` for ``Optional[T]``, else ``None``."""
    if typing.get_origin(tp) not in (typing.Union, types.UnionType):
        return None
    args = [a for a in typing.get_args(tp) if a is not type(None)]
    if len(args) == 1 and len(typing.get_args(tp)) == 2:
        return args[0]
    return None


@functools.lru_cache(maxsize=None)
def describe_type(tp: Any) -> TypeSpec:
    """Build the descriptor for an annotation."""
    # The capability check goes first so that it overrides built-in kinds.
    if is_text_parsable(tp):
        return Parsable(tp)

    inner = _optional_arg(tp)
    if inner is not None:
        return Pointer(tp, describe_type(inner))

    origin = typing.get_origin(tp)
    if origin is list:
        args = typing.get_args(tp)
        if len(args) == 1:
            return Sequence(tp, describe_type(args[0]))
        return Unsupported(tp)

    if isinstance(tp, type) and origin is None:
        # bool before int: bool is an int subclass.
        if issubclass(tp, bool):
            return Scalar(tp, "bool")
        if issubclass(tp, str):
            return Scalar(tp, "str")
        if issubclass(tp, int):
            return Scalar(tp, "int")
        if issubclass(tp, float):
            return Scalar(tp, "float")

    return Unsupported(tp)


# --- Section Descriptors ---


def env_name(name: str, override: Optional[str] = None) -> str:
    """Upper-case a declared name, or an override with dashes mapped to ``_``."""
    if override:
        return override.replace("-", "_").upper()
    return name.upper()


@dataclass(frozen=True)
class FieldSpec:
    attr: str
    env_name: str
    type: TypeSpec

    @property
    def exported(self) -> bool:
        return not self.attr.startswith("_")


@dataclass(frozen=True)
class SectionSpec:
    attr: str
    env_name: str
    record_type: type
    fields: Tuple[FieldSpec, ...]
    dynamic: bool = False
    # Root attribute holding the default subsection record, if any.
    default_attr: Optional[str] = None

    @property
    def exported(self) -> bool:
        return not self.attr.startswith("_")

    def exported_fields(self) -> List[FieldSpec]:
        return [f for f in self.fields if f.exported]


@dataclass(frozen=True)
class ConfigSchema:
    config_type: type
    sections: Tuple[SectionSpec, ...]

    def section(self, attr: str) -> SectionSpec:
        for sec in self.sections:
            if sec.attr == attr:
                return sec
        raise KeyError(attr)


def _field_override(f: dataclasses.Field) -> Optional[str]:
    return f.metadata.get(NAME_KEY) if f.metadata else None


@functools.lru_cache(maxsize=None)
def record_fields(record_type: type) -> Tuple[FieldSpec, ...]:
    """Describe the fields of a section record, in declaration order."""
    hints = typing.get_type_hints(record_type)
    return tuple(
        FieldSpec(f.name, env_name(f.name, _field_override(f)), describe_type(hints[f.name]))
        for f in dataclasses.fields(record_type)
    )


def _dynamic_record_type(tp: Any) -> Optional[type]:
    """Return ``R`` for ``Dict[str, R]`` with ``R`` a dataclass."""
    if typing.get_origin(tp) is not dict:
        return None
    args = typing.get_args(tp)
    if len(args) != 2 or args[0] is not str:
        return None
    value_type = args[1]
    if isinstance(value_type, type) and dataclasses.is_dataclass(value_type):
        return value_type
    return None


@functools.lru_cache(maxsize=None)
def schema_for(config_type: type) -> ConfigSchema:
    """
    Build (once) the schema of a configuration dataclass.

    Raises:
        TypeError: If ``config_type`` is not a dataclass.
    """
    if not (isinstance(config_type, type) and dataclasses.is_dataclass(config_type)):
        raise TypeError(f"configuration type must be a dataclass, got {config_type!r}")

    hints = typing.get_type_hints(config_type)
    root_fields = dataclasses.fields(config_type)
    sections = []
    for f in root_fields:
        tp = hints[f.name]
        name = env_name(f.name, _field_override(f))
        # Optional[Record] and Optional[Dict[...]] are sections that may be unset.
        tp = _optional_arg(tp) or tp
        if isinstance(tp, type) and dataclasses.is_dataclass(tp):
            sections.append(SectionSpec(f.name, name, tp, record_fields(tp)))
            continue
        record_type = _dynamic_record_type(tp)
        if record_type is None:
            log.debug(f"DEBUG [cfgenv.schema]: '{config_type.__name__}.{f.name}' is not a section, skipping.")
            continue
        default_attr = None
        candidate = DEFAULT_PREFIX + f.name
        if candidate in hints and (_optional_arg(hints[candidate]) or hints[candidate]) is record_type:
            default_attr = candidate
        sections.append(SectionSpec(f.name, name, record_type, record_fields(record_type),
                                    dynamic=True, default_attr=default_attr))
    return ConfigSchema(config_type, tuple(sections))


# --- Zero Values ---


def zero_value(spec: TypeSpec) -> Any:
    """Return the zero value for a field type."""
    if isinstance(spec, Scalar):
        return spec.py_type()
    if isinstance(spec, Sequence):
        return []
    tp = spec.py_type
    if typing.get_origin(tp) is dict:
        return {}
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return zero_record(tp)
    return None


def zero_record(record_type: type) -> Any:
    """
    Instantiate a record with its declared defaults, zero-filling the rest.
    """
    hints = typing.get_type_hints(record_type)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        kwargs[f.name] = zero_value(describe_type(hints[f.name]))
    return record_type(**kwargs)


def env_keys(config_type: type, prefix: str = "") -> List[str]:
    """
    List every environment key recognised for ``config_type``.

    Dynamic sections use a ``<name>`` placeholder for the subsection key.
    """
    prefix = normalize_prefix(prefix)
    keys = []
    for sec in schema_for(config_type).sections:
        if not sec.exported:
            continue
        base = prefix + sec.env_name + "_"
        if sec.dynamic:
            base += "<name>_"
        keys.extend(base + f.env_name for f in sec.exported_fields())
    return keys


def normalize_prefix(prefix: Optional[str]) -> str:
    if prefix and not prefix.endswith("_"):
        return prefix + "_"
    return prefix or ""
