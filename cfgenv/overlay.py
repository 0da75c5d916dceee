# cfgenv/overlay.py
"""
cfgenv.overlay
--------------

Applies environment variable overrides to an already-populated configuration
object, using naming convention only.

For a config class like::

    @dataclass
    class Server:
        host: str = ""
        ports: List[int] = field(default_factory=list)

    @dataclass
    class AppConfig:
        server: Server = field(default_factory=Server)
        upstream: Dict[str, Server] = field(default_factory=dict)
        default_upstream: Server = field(default_factory=Server)

and the prefix ``MYAPP``, the recognised keys are ``MYAPP_SERVER_HOST``,
``MYAPP_SERVER_PORTS``, ``MYAPP_UPSTREAM_<name>_HOST`` and so on. Subsection
names are matched case-sensitively; a variable naming an unknown subsection
creates it, seeded from ``default_upstream``.

Sequence fields are appended to, never replaced. Other fields are replaced.
Nothing is ever reset when no variable matches.

Subsections are discovered by field-name *suffix*: ``UPSTREAM_a_b_HOST`` names
subsection ``a_b``. A subsection whose name ends in ``_<FIELD>`` for some other
field is ambiguous; the first field in declaration order wins.
"""

import copy
import logging
from typing import Any, Dict, Mapping

from .convert import convert
from .schema import FieldSpec, SectionSpec, Sequence, normalize_prefix, schema_for, zero_record

log = logging.getLogger(__name__)


def overlay(config: Any, prefix: str, env: Mapping[str, str]) -> None:
    """
    Overlay ``env`` onto ``config`` in place.

    Args:
        config: A populated configuration dataclass instance.
        prefix: Environment prefix; ``_`` is appended when missing. May be empty.
        env: Variable name to raw value. Only read, never modified.

    Raises:
        ConversionError: The first value that failed to convert. Changes applied
                         before the failure are kept.
    """
    prefix = normalize_prefix(prefix)
    schema = schema_for(type(config))
    for section in schema.sections:
        if not section.exported:
            continue
        base = prefix + section.env_name
        if section.dynamic:
            _overlay_dynamic(config, section, base, env)
        else:
            _overlay_flat(config, section, base, env)


def _apply(record: Any, field: FieldSpec, raw: str, key: str) -> None:
    """Convert ``raw`` and write it to ``record``; sequences are appended."""
    value = convert(field.type, raw)
    if isinstance(field.type, Sequence):
        current = getattr(record, field.attr) or []
        value = list(current) + value
    setattr(record, field.attr, value)
    log.debug(f"DEBUG [cfgenv.overlay]: Applied '{key}' to field '{field.attr}'.")


def _overlay_flat(config: Any, section: SectionSpec, base: str, env: Mapping[str, str]) -> None:
    for field in section.exported_fields():
        key = base + "_" + field.env_name
        if key not in env:
            continue
        record = getattr(config, section.attr)
        if record is None:
            record = zero_record(section.record_type)
            setattr(config, section.attr, record)
        _apply(record, field, env[key], key)


def _overlay_dynamic(config: Any, section: SectionSpec, base: str, env: Mapping[str, str]) -> None:
    section_prefix = base + "_"
    # Keys relative to the section: "<subsection>_<FIELD>", or "<FIELD>" for
    # the unnamed subsection.
    pending: Dict[str, str] = {}
    for key, value in env.items():
        if key.startswith(section_prefix) and len(key) > len(section_prefix):
            pending[key[len(section_prefix):]] = value
    if not pending:
        return

    fields = section.exported_fields()
    subsections = getattr(config, section.attr)

    # Existing subsections first, so that their keys are not mistaken for new ones.
    for name, record in list((subsections or {}).items()):
        name_prefix = name + "_" if name else ""
        for field in fields:
            rel = name_prefix + field.env_name
            if rel not in pending:
                continue
            _apply(record, field, pending.pop(rel), section_prefix + rel)

    if not pending:
        return

    for field in fields:
        suffix = "_" + field.env_name
        for rel in [k for k in pending if k.endswith(suffix)]:
            name = rel[:-len(suffix)]
            if subsections is None:
                subsections = {}
                setattr(config, section.attr, subsections)
            record = subsections.get(name)
            if record is None:
                record = new_subsection(config, section)
                subsections[name] = record
                log.debug(f"DEBUG [cfgenv.overlay]: Created subsection '{name}' in section '{section.attr}'.")
            _apply(record, field, pending.pop(rel), section_prefix + rel)

    if pending:
        log.debug(f"DEBUG [cfgenv.overlay]: Ignored unmatched keys for section '{section.attr}': "
                  f"{sorted(section_prefix + k for k in pending)}")


def new_subsection(config: Any, section: SectionSpec) -> Any:
    """
    Create a record for a dynamic section, seeded from its default record.

    The default record is deep-copied; it is never modified.
    """
    default = getattr(config, section.default_attr, None) if section.default_attr else None
    if default is None:
        return zero_record(section.record_type)
    return copy.deepcopy(default)
