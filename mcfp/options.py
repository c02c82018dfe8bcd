r"""
mcfp option descriptors and registration helpers.

Overview
- Descriptors (a closed set of three variants)
  • Flag: presence-only switch; its seen-count is the signal (-v, --verbose).
  • Option[_T]: takes exactly one argument and stores at most one value.
  • Multi[_T]: takes one argument per occurrence and accumulates them in order.

- Registration helpers
  • make_option(name, type=..., default=..., descr=...): picks the variant from
    the declared type (none → Flag, list[T] → Multi[T], anything else → Option[T]);
    the type is inferred from the default when only a default is given.
  • make_hidden_option(...): the same, excluded from help output.

Names
- "name,c" declares the long name "name" with the short alias "c".
- "c" (one character) declares a short-only option.
- anything else is a long name without a short alias.
- long names are runs of word characters and '-', not starting with '-';
  underscores are fine ("param_int").

Per-option parse state
- seen: how often the option occurred (once per occurrence, also for Multi).
- value / values: what was parsed (Option is pre-seeded with its default).
The parsers mutate this state through the private _see()/_assign() hooks; the
public properties are read-only and hand out copies.

Quick example:
    >>> verbose = make_option("verbose,v", descr="more output")
    >>> level = make_option("level", default=1, descr="compression level")
    >>> files = make_option("file,f", list[str], descr="input files")
    >>> type(verbose).__name__, type(level).__name__, type(files).__name__
    ('Flag', 'Option', 'Multi')
"""
import builtins
import functools
import operator
import re
import typing

from rich.text import Text

from .conversions import converter, represent
from .utils import *


class OptionType(type):
    """
    Metaclass giving descriptors readable representations and read-only fields.

    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in programmer-error messages.
    - every name in __introspectable__ becomes a read-only property mirroring
      the backing field "_<name>".
    - __repr__/__rich_repr__ show the __introspectable__ fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: split and validate the registration name, check descr/hidden.

    Mutates `metadata` in place: 'name' becomes the long name ("" when the
    option is short-only) and 'short' is added (None when absent).

    Raises
    - TypeError: name or descr of the wrong type.
    - ValueError: empty name/descr, malformed long name, unusable short name.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} name cannot be empty")

    if len(name) == 1:
        long, short = "", name
    elif len(name) > 2 and name[-2] == ",":
        long, short = name[:-2], name[-1]
    else:
        long, short = name, None

    if long and not re.fullmatch(r"\w[\w-]*", long):
        raise ValueError(f"{cls.__typename__} long name {long!r} must be word characters or '-' (not leading)")
    if short is not None and (short.isspace() or short in "-=,#"):
        raise ValueError(f"{cls.__typename__} short name {short!r} is not usable on a command line")

    metadata["name"] = long
    metadata["short"] = short

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_typed_metadata(cls, metadata, /):
    """
    Internal: validate the value type of Option/Multi and resolve its converter.

    - type: callable; bool is refused (a flag already says yes/no).
    - default (Option only): when given and the type is a class, it must be an
      instance of it; ints are widened for float options.
    """
    type = metadata["type"]
    try:
        metadata["convert"] = converter(type)
    except TypeError as error:
        raise TypeError(f"{cls.__typename__} {error}") from None

    if (default := metadata.get("default", Unset)) is Unset or default is None:
        return
    if type is float and isinstance(default, int) and not isinstance(default, bool):
        metadata["default"] = float(default)
    elif isinstance(type, builtins.type) and not isinstance(default, type):
        raise TypeError(f"{cls.__typename__} default {default!r} is not a {type.__name__}")


class OptionBase(metaclass=OptionType):
    """
    Shared behavior of the three descriptor variants.

    Not instantiated directly; use Flag, Option, Multi or make_option().
    """

    def _see(self):
        self._seen += 1

    @property
    def flag(self):
        return isinstance(self, Flag)

    @property
    def multi(self):
        return isinstance(self, Multi)

    @property
    def has_default(self):
        return False

    @property
    def has_value(self):
        return False

    @property
    def label(self):
        """
        Help-column label: "-v [ --verbose ]", "-v", or "--name", followed by
        " arg" for value-taking options and " (=default)" when a default exists.
        """
        if self._short and self._name:
            label = f"-{self._short} [ --{self._name} ]"
        elif self._short:
            label = f"-{self._short}"
        else:
            label = f"--{self._name}"
        if not self.flag:
            label += " arg"
            if self.has_default:
                label += " (=%s)" % represent(self._default)
        return label

    @property
    def width(self):
        """
        Columns needed before the description: indent, label and a gap.
        """
        return 2 + len(self.label) + 2

    @property
    def display(self):
        """
        The most readable spelling of this option for messages.
        """
        return f"--{self._name}" if self._name else f"-{self._short}"


class Flag(OptionBase):
    """
    Presence-only option.

    A flag never takes an argument: "--flag=x" on the command line and
    "flag = x" in a config file are faults. Every occurrence bumps `seen`,
    which makes repeatable flags ("-vvv") usable as levels.
    """

    __introspectable__ = (
        "name",
        "short",
        "descr",
        "hidden",
        "seen",
    )

    def __init__(self, name, /, descr=Unset, *, hidden=False):
        metadata = {
            "name": name,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(type(self), metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        self._seen = 0


class Option[_T](OptionBase):
    """
    Single-valued option.

    Holds at most one value. On the command line the last occurrence wins; a
    config file only fills it when nothing set it before. A default pre-seeds
    the value, so has() and get() succeed even when the option never occurs.
    """

    __introspectable__ = (
        "name",
        "short",
        "type",
        "default",
        "descr",
        "hidden",
        "seen",
        "value",
    )

    def __init__(self, name, /, type=str, default=Unset, descr=Unset, *, hidden=False):
        metadata = {
            "name": name,
            "type": type,
            "default": default,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_typed_metadata(builtins.type(self), metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        self._seen = 0
        self._value = self._default

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def has_value(self):
        return self._value is not Unset

    def _assign(self, text):
        self._value = self._convert(text)


class Multi[_T](OptionBase):
    """
    Repeatable option accumulating one value per occurrence, in encounter order.

    Config-file entries keep adding to the values collected from the command line.
    """

    __introspectable__ = (
        "name",
        "short",
        "type",
        "descr",
        "hidden",
        "seen",
        "values",
    )

    def __init__(self, name, /, type=str, descr=Unset, *, hidden=False):
        metadata = {
            "name": name,
            "type": type,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_typed_metadata(builtins.type(self), metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        self._seen = 0
        self._values = []

    @property
    def has_value(self):
        return bool(self._values)

    def _assign(self, text):
        self._values.append(self._convert(text))


def make_option(name, /, type=Unset, default=Unset, descr=Unset, *, hidden=False):
    """
    Build the descriptor matching the declared type.

    Selection
    - no type and no default      → Flag
    - list / list[T]              → Multi (element type T, str for a bare list)
    - any other type (or inferred
      from the default's type)    → Option

    Raises
    - TypeError: a default for a flag-like or multi declaration, bad types.
    - ValueError: malformed names.
    """
    if type is Unset:
        if default is Unset:
            return Flag(name, descr, hidden=hidden)
        if default is None:
            raise TypeError("make_option() cannot infer a type from a None default")
        type = builtins.type(default)

    if type is list or typing.get_origin(type) is list:
        if default is not Unset:
            raise TypeError("make_option() multi options cannot have a default")
        element, = typing.get_args(type) or (str,)
        return Multi(name, element, descr, hidden=hidden)

    return Option(name, type, default, descr, hidden=hidden)


def make_hidden_option(name, /, type=Unset, default=Unset, descr=Unset):
    """
    Same as make_option(), but the option is left out of the help output.
    It is still parsed from the command line and from config files.
    """
    return make_option(name, type, default, descr, hidden=True)


__all__ = (
    # Classes (descriptors)
    "Flag",
    "Option",
    "Multi",

    # Registration helpers
    "make_option",
    "make_hidden_option",
)

# Keep the metaclass out of star-imports and docs; not part of the public API.
del OptionType
