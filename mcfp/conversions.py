"""
Typed value conversion: text in, typed value out (and back, for help defaults).

Converters
- integer(text): strict decimal integers ("-12", "42"); no blanks, no "+", no "_".
- floating(text, maximum=...): a small decimal/exponent scanner. It is stricter
  than float(): "inf", "nan", "1_000" and surrounding blanks are all rejected,
  and the same text always yields the same value or the same fault.
- path(text, type=pathlib.Path): the text wrapped in a path object, never checked.
- string(text): the text itself.

Selection
- converter(type) picks one of the above for a declared option type, or wraps
  any other callable so that its ValueError/TypeError becomes InvalidArgumentError.
- represent(value) renders a value as text for "(=default)" help decorations;
  converting the result back reproduces the value.

Faults
- InvalidArgumentError: the text does not spell a value of the type.
- ResultOutOfRangeError: the text spells a value the type cannot hold.
"""
import builtins
import functools
import math
import os
import pathlib
import re
import sys
from enum import IntEnum

from .faults import *


class _Scan(IntEnum):
    INTEGER_SIGN = 1
    INTEGER = 2
    FRACTION = 3
    EXPONENT_SIGN = 4
    EXPONENT = 5


_DIGITS = "0123456789"


def _invalid(text, kind):
    return InvalidArgumentError(
        "invalid argument %r, expected %s" % (text, kind),
        title="invalid argument",
        code=FaultCode.INVALID_ARGUMENT,
        text=text,
        hint="write the value as %s (for example: %s)" % (kind, {"an integer": "42", "a number": "0.5e-3"}.get(kind, "…")),
        docs=getdoc(FaultCode.INVALID_ARGUMENT),
    )


def _out_of_range(text, kind):
    return ResultOutOfRangeError(
        "argument %r is out of range for %s" % (text, kind),
        title="result out of range",
        code=FaultCode.RESULT_OUT_OF_RANGE,
        text=text,
        hint="use a smaller magnitude",
        docs=getdoc(FaultCode.RESULT_OUT_OF_RANGE),
    )


def integer(text, /):
    """
    Convert `text` to an int.

    Accepted: an optional "-" followed by ASCII digits, nothing else.
    """
    if not re.fullmatch(r"-?[0-9]+", text):
        raise _invalid(text, "an integer")
    try:
        return int(text)
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        raise _out_of_range(text, "an integer") from None


def floating(text, /, maximum=sys.float_info.max):
    """
    Convert `text` to a float with a hand-rolled scanner.

    Grammar
    - [sign] digits [. [digits]] [(e|E) [sign] digits]
    - [sign] . digits [(e|E) [sign] digits]

    The mantissa digits are accumulated as an integer, each fraction digit divides
    a running scale by ten, and the signed exponent is applied at the end as a
    power of ten. A NaN result is an InvalidArgumentError; anything whose magnitude
    exceeds `maximum` is a ResultOutOfRangeError.
    """
    state = _Scan.INTEGER_SIGN
    sign = 1
    mantissa = 0
    scale = 1.0
    digits = 0
    exponent_sign = 1
    exponent = 0
    exponent_digits = 0

    index = 0
    while index < len(text):
        char = text[index]
        match state:
            case _Scan.INTEGER_SIGN:
                if char in "+-":
                    sign = -1 if char == "-" else 1
                    state = _Scan.INTEGER
                elif char in _DIGITS:
                    mantissa = int(char)
                    digits += 1
                    state = _Scan.INTEGER
                elif char == ".":
                    state = _Scan.FRACTION
                else:
                    break
            case _Scan.INTEGER:
                if char in _DIGITS:
                    mantissa = 10 * mantissa + int(char)
                    digits += 1
                elif char in "eE":
                    state = _Scan.EXPONENT_SIGN
                elif char == ".":
                    state = _Scan.FRACTION
                else:
                    break
            case _Scan.FRACTION:
                if char in _DIGITS:
                    mantissa = 10 * mantissa + int(char)
                    scale /= 10
                    digits += 1
                elif char in "eE":
                    state = _Scan.EXPONENT_SIGN
                else:
                    break
            case _Scan.EXPONENT_SIGN:
                if char in "+-":
                    exponent_sign = -1 if char == "-" else 1
                    state = _Scan.EXPONENT
                elif char in _DIGITS:
                    exponent = int(char)
                    exponent_digits += 1
                    state = _Scan.EXPONENT
                else:
                    break
            case _Scan.EXPONENT:
                if char in _DIGITS:
                    exponent = 10 * exponent + int(char)
                    exponent_digits += 1
                else:
                    break
        index += 1

    # Trailing garbage, no mantissa digits, or an exponent marker without digits.
    if index != len(text) or not digits or (state >= _Scan.EXPONENT_SIGN and not exponent_digits):
        raise _invalid(text, "a number")

    try:
        value = sign * mantissa * scale
    except OverflowError:
        raise _out_of_range(text, "a number") from None

    if exponent:
        try:
            value *= 10.0 ** (exponent_sign * exponent)
        except OverflowError:
            value = math.copysign(math.inf, value) if value else value

    if math.isnan(value):
        raise _invalid(text, "a number")
    if abs(value) > maximum:
        raise _out_of_range(text, "a number")
    return value


def path(text, /, type=pathlib.Path):
    """
    Wrap `text` in `type` (a pathlib.PurePath subclass). Any text is a valid path.
    """
    return type(text)


def string(text, /):
    """
    Identity conversion.
    """
    return str(text)


@functools.cache
def converter(type, /):
    """
    Return the text-to-value function for a declared option type.

    - int → integer, float → floating, str → string
    - pathlib.PurePath subclasses → path(text, type=...)
    - any other callable → called with the text; ValueError/TypeError become
      InvalidArgumentError
    """
    if type is bool:
        raise TypeError("bool is not a valid option type; declare a flag instead")
    if type is int:
        return integer
    if type is float:
        return floating
    if type is str:
        return string
    if isinstance(type, builtins.type) and issubclass(type, pathlib.PurePath):
        return functools.partial(path, type=type)
    if not callable(type):
        raise TypeError("option type must be callable")

    def generic(text, /):
        try:
            return type(text)
        except (ValueError, TypeError) as error:
            raise InvalidArgumentError(
                "invalid argument %r (%s)" % (text, error),
                title="invalid argument",
                code=FaultCode.INVALID_ARGUMENT,
                text=text,
                hint="check the expected format in the option description",
                docs=getdoc(FaultCode.INVALID_ARGUMENT),
            ) from error

    generic.__name__ = generic.__qualname__ = getattr(type, "__name__", "generic")
    return generic


def represent(value, /):
    """
    Render a value as text such that converting it back yields the same value.
    """
    match value:
        case float():
            return repr(value)
        case int():
            return str(value)
        case os.PathLike():
            return os.fspath(value)
        case _:
            return str(value)


__all__ = (
    "integer",
    "floating",
    "path",
    "string",
    "converter",
    "represent",
)
