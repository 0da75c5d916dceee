# cfgenv/kinds.py
"""
cfgenv.kinds
------------

Field types that Python lacks natively: fixed-width integers, 32-bit floats,
and the ``from_text`` capability user types can implement.

Fixed-width types are plain ``int``/``float`` subclasses, so values compare
equal to ordinary numbers::

    @dataclass
    class Server:
        port: Uint16 = Uint16(8080)
        retries: Int8 = Int8(3)
"""

from typing import Any, Protocol, Tuple, runtime_checkable


class FixedInt(int):
    """Base for integers with a bounded range. Plain ``int`` fields use 64 bits."""

    bits = 64
    signed = True

    @classmethod
    def bounds(cls) -> Tuple[int, int]:
        if cls.signed:
            return -(1 << (cls.bits - 1)), (1 << (cls.bits - 1)) - 1
        return 0, (1 << cls.bits) - 1


class Int8(FixedInt):
    bits = 8


class Int16(FixedInt):
    bits = 16


class Int32(FixedInt):
    bits = 32


class Int64(FixedInt):
    bits = 64


class Uint(FixedInt):
    bits = 64
    signed = False


class Uint8(Uint):
    bits = 8


class Uint16(Uint):
    bits = 16


class Uint32(Uint):
    bits = 32


class Uint64(Uint):
    bits = 64


class Float32(float):
    """A float stored with single precision."""


def int_bounds(tp: type) -> Tuple[int, int]:
    """Return the ``(min, max)`` range for an integer field type."""
    if isinstance(tp, type) and issubclass(tp, FixedInt):
        return tp.bounds()
    return Int64.bounds()


@runtime_checkable
class TextParsable(Protocol):
    """
    Capability for types that parse themselves from text.

    ``from_text`` is a classmethod returning a new instance; it reports bad
    input by raising ``ValueError`` (or ``TypeError``). It takes precedence over
    every built-in conversion rule, even for ``str``/``int`` subclasses.
    """

    @classmethod
    def from_text(cls, text: str) -> Any:
        ...


def is_text_parsable(tp: Any) -> bool:
    return isinstance(tp, type) and callable(getattr(tp, "from_text", None))
