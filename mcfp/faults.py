"""
mcfp faults (errors) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every classified failure of the
  option registry, the argv scanner, the config-file reader and the value
  converters.
- ConfigException: base type carrying a message plus context options, able to
  render itself with rich and to be surfaced through trigger().
- trigger(): single exit point for faults (raise, or render and exit in shell mode).
- getdoc(): optional long description for a code, provided by the host application.

Message style
- Lowercased, one sentence, always saying where: "at second position" for
  argv tokens, "at line 3" for config files.
- A single actionable hint rendered under the message.

Integration
- The core parsers (mcfp.parsers) return faults instead of raising them.
- The Config facade passes returned faults to trigger(), merging its runtime
  options (prog, shell, fancy, colorful) into the fault first.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by domain)
    - option resolution (1111x)
      • UNKNOWN_OPTION, OPTION_DOES_NOT_ACCEPT_ARGUMENT, MISSING_ARGUMENT_FOR_OPTION
    - config files (1115x)
      • INVALID_CONFIG_FILE, CONFIG_FILE_NOT_FOUND
    - queries (1116x)
      • OPTION_NOT_SPECIFIED, WRONG_TYPE_CAST
    - value conversion (1117x)
      • INVALID_ARGUMENT, RESULT_OUT_OF_RANGE
    """
    # --- option resolution errors ---
    UNKNOWN_OPTION                  = 11112
    OPTION_DOES_NOT_ACCEPT_ARGUMENT = 11113
    MISSING_ARGUMENT_FOR_OPTION     = 11117

    # --- config file errors ---
    INVALID_CONFIG_FILE             = 11151
    CONFIG_FILE_NOT_FOUND           = 11152

    # --- query errors ---
    OPTION_NOT_SPECIFIED            = 11161
    WRONG_TYPE_CAST                 = 11162

    # --- conversion errors ---
    INVALID_ARGUMENT                = 11171
    RESULT_OUT_OF_RANGE             = 11172

    def normalize(self):
        """
        the label shown for this code in rendered faults.

        a __codes__ mapping in __main__ may override numeric ids with labels;
        without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ConfigException(Exception):
    """
    Base class of every classified failure.

    Options
    - code (FaultCode), title (str), hint (str): always set by the raiser.
    - name, index, line, text, ...: context for hosts that inspect faults.
    - prog, shell, fancy, colorful: runtime options merged in by Config before trigger().
    """

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            "fault-prog": "bold #F5F5F5",  # program name
            "fault-code": "bold #38BDF8",  # numeric code
            "fault-title": "bold #F43F5E",  # rose title
            "fault-message": "#D4D4D8",  # zinc message
            "fault-hint": "italic #86EFAC",  # mint hint, arrow included
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), styles[style] if colorful else "")

        prog = self.options.get("prog") or getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "mcfp")
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            text(prog, "fault-prog"),
            " — ",
            text(code.normalize() if code is not None else "?", "fault-code"),
            " | ",
            text(self.options.get("title", "error").title(), "fault-title"),
            " ]"
        )
        message = text(self.message, "fault-message")
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(text(" → ", "fault-hint") + text(hint, "fault-hint"))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, /, **overrides):
        # "message" rewrites the sentence; everything else lands in the options.
        message = overrides.pop("message", self.message)
        return type(self)(message, **{**self.options, **overrides})


class UnknownOptionError(ConfigException): ...
class OptionDoesNotAcceptArgumentError(ConfigException): ...
class MissingArgumentForOptionError(ConfigException): ...
class OptionNotSpecifiedError(ConfigException): ...
class InvalidConfigFileError(ConfigException): ...
class WrongTypeCastError(ConfigException): ...
class ConfigFileNotFoundError(ConfigException): ...
class InvalidArgumentError(ConfigException): ...
class ResultOutOfRangeError(ConfigException): ...


def trigger(fault, /, **options):
    """
    merge runtime options into a copy of `fault` and surface it.

    contract
    - fault must provide __trigger__ and __replace__ (see ConfigException).
    - options are merged into a copy of the fault before triggering.
    - outside shell mode the fault is raised; in shell mode it is rendered on
      stderr and the process exits with status 1.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() expects a fault (an object with __trigger__ and __replace__)")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from a __docs__ mapping in __main__.

    returns None when the host application documents nothing for the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ConfigException",
    "UnknownOptionError",
    "OptionDoesNotAcceptArgumentError",
    "MissingArgumentForOptionError",
    "OptionNotSpecifiedError",
    "InvalidConfigFileError",
    "WrongTypeCastError",
    "ConfigFileNotFoundError",
    "InvalidArgumentError",
    "ResultOutOfRangeError",
    "FaultCode",
    "trigger",
    "getdoc",
)
