# cfgenv/exceptions.py
"""
cfgenv.exceptions
-----------------

Custom exceptions for cfgenv.

Conversion errors come from the value converter and abort an overlay pass.
``ConfigParseError`` and ``ConfigWarning`` come from the base parser: the first
one stops everything, the second one is raised only once the overlay succeeded.
"""


class CfgenvError(Exception):
    """Base class for every error raised by cfgenv."""


class ConversionError(CfgenvError, ValueError):
    """
    Raised when a raw string cannot be converted to a field's type.
    """

    def __init__(self, message, type_name, raw=None):
        super().__init__(message)
        self.type_name = type_name
        self.raw = raw


class Overflow(ConversionError):
    """
    Raised when numeric text parses but does not fit the destination type.
    """


class IntegerOverflow(Overflow):
    """
    Raised when integer text does not fit the destination width.
    """

    def __init__(self, type_name, raw):
        super().__init__(f"integer overflow: {raw!r} out of range for {type_name}", type_name, raw)


class FloatOverflow(Overflow):
    """
    Raised when a finite float does not fit a 32-bit float.
    """

    def __init__(self, type_name, raw):
        super().__init__(f"float overflow: {raw!r} out of range for {type_name}", type_name, raw)


class ParseFailure(ConversionError):
    """
    Raised when text is not a valid rendering of the target type.

    If ``message`` is given (a custom ``from_text`` failed), it is used verbatim.
    """

    def __init__(self, type_name, raw, cause=None, message=None):
        if message is None:
            message = f"failed to parse {raw!r} as {type_name}"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message, type_name, raw)
        self.cause = cause


class UnsupportedType(ConversionError):
    """
    Raised when the target type has no conversion rule.
    """

    def __init__(self, type_name, raw=None):
        super().__init__(f"unsupported type: {type_name}", type_name, raw)


class ConfigParseError(CfgenvError):
    """
    Raised when configuration data cannot be parsed into a usable object.
    """

    def __init__(self, message, path=None):
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class ConfigWarning(CfgenvError):
    """
    Raised when configuration data was bound but some of it was ignored.

    The target object is fully usable; callers decide whether this is fatal.
    """

    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
