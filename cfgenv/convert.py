# cfgenv/convert.py
"""
cfgenv.convert
--------------

Converts raw environment strings into typed field values.

The converter knows nothing about configuration shape; it only understands the
descriptors from ``cfgenv.schema``. Numbers and booleans follow the config
format's own rules: whitespace around them is ignored, integers may be decimal
or ``0x`` hexadecimal and are range-checked against their declared width.
"""

import math
import re
import struct
from typing import Any

from .exceptions import ConversionError, FloatOverflow, IntegerOverflow, ParseFailure, UnsupportedType
from .kinds import Float32, int_bounds
from .schema import Parsable, Pointer, Scalar, Sequence, TypeSpec, describe_type, type_name

TRUE_TOKENS = frozenset({"1", "t", "true", "y", "yes", "on"})
FALSE_TOKENS = frozenset({"0", "f", "false", "n", "no", "off"})

_DEC_RE = re.compile(r"[+-]?[0-9]+")
_HEX_RE = re.compile(r"0[xX][0-9a-fA-F]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def convert(target: Any, raw: str) -> Any:
    """
    Convert ``raw`` to a value of ``target``.

    Args:
        target: A type annotation (``int``, ``Optional[bool]``, ``List[Int8]``...)
                or a ``TypeSpec`` from ``cfgenv.schema``.
        raw: The untyped string, e.g. an environment variable's value.

    Returns:
        The converted value. ``Optional[T]`` targets yield a ``T`` value.

    Raises:
        IntegerOverflow: Integer text outside the destination width.
        FloatOverflow: Finite float text outside 32-bit range for ``Float32``.
        ParseFailure: Malformed text, or a ``from_text`` implementation failed.
        UnsupportedType: No conversion rule exists for the target.
    """
    spec = target if isinstance(target, TypeSpec) else describe_type(target)
    return _convert(spec, raw)


def _convert(spec: TypeSpec, raw: str) -> Any:
    if isinstance(spec, Parsable):
        return _from_text(spec, raw)
    if isinstance(spec, Pointer):
        return _convert(spec.inner, raw)
    if isinstance(spec, Scalar):
        if spec.kind == "str":
            return raw if spec.py_type is str else spec.py_type(raw)
        if spec.kind == "bool":
            return parse_bool(raw)
        if spec.kind == "int":
            return parse_int(spec.py_type, raw)
        return parse_float(spec.py_type, raw)
    if isinstance(spec, Sequence):
        # No escaping: a comma always separates elements.
        return [_convert(spec.element, part) for part in raw.split(",")]
    raise UnsupportedType(spec.name, raw)


def _from_text(spec: Parsable, raw: str) -> Any:
    try:
        return spec.py_type.from_text(raw)
    except ConversionError:
        raise
    except (ValueError, TypeError) as e:
        raise ParseFailure(spec.name, raw, cause=e, message=str(e)) from e


def parse_bool(raw: str) -> bool:
    token = "".join(raw.split()).lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ParseFailure("bool", raw)


def parse_int(tp: type, raw: str) -> int:
    text = raw.strip()
    if _HEX_RE.fullmatch(text):
        value = int(text, 16)
    elif _DEC_RE.fullmatch(text):
        value = int(text, 10)
    else:
        raise ParseFailure(type_name(tp), raw)
    lo, hi = int_bounds(tp)
    if not lo <= value <= hi:
        raise IntegerOverflow(type_name(tp), raw)
    return value if tp is int else tp(value)


def parse_float(tp: type, raw: str) -> float:
    text = raw.strip()
    if not _FLOAT_RE.fullmatch(text):
        raise ParseFailure(type_name(tp), raw)
    value = float(text)
    if not issubclass(tp, Float32):
        return value if tp is float else tp(value)
    try:
        # Round to single precision. Depending on the interpreter, a finite
        # value out of range either raises or packs as infinity.
        rounded = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        raise FloatOverflow(type_name(tp), raw) from None
    if math.isinf(rounded) and not math.isinf(value):
        raise FloatOverflow(type_name(tp), raw)
    return tp(rounded)
