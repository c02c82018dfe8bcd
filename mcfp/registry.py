"""
The option registry: what a parse session knows and what it collected.

A Registry owns
- the options in registration order, indexed by long name and by short character,
- the operands (non-option arguments) in encounter order, duplicates included,
- the registry-wide ignore-unknown mode.

Options are copied on registration, so two registries built from the same
descriptors never share parse state. Parsing into a registry is cumulative
(argv first, then a config file, ...); to start over, build a new registry.

Queries
- has(name): the option exists and was seen or carries a default.
- count(name): how often it was seen (0 for unknown names).
- get(name, type=Unset): the stored value, checked against `type` when given.
- find(name): long name first, then the short index for single characters.
"""
import builtins
import copy
import typing

from .faults import *
from .options import Flag, Option, Multi
from .utils import *


class Registry:
    """
    Ordered option collection plus accumulated operands for one parse session.

    Lookups are O(1) through the long and short indexes. Names must be unique:
    registering a second option with a taken long or short name is refused.
    """

    def __init__(self, *options, ignore_unknown=False):
        self._options = []
        self._longs = {}
        self._shorts = {}
        self._operands = []
        self.ignore_unknown = ignore_unknown
        for option in options:
            self.register(option)

    def register(self, option, /):
        """
        Append a copy of `option` and index its names.

        Raises
        - TypeError: not a Flag/Option/Multi.
        - ValueError: long or short name already registered.
        """
        if not isinstance(option, Flag | Option | Multi):
            raise TypeError("register() argument must be an option (see make_option())")
        if option.name and option.name in self._longs:
            raise ValueError(f"option name {option.name!r} is already registered")
        if option.short and option.short in self._shorts:
            raise ValueError(f"option short name {option.short!r} is already registered")

        option = copy.deepcopy(option)
        self._options.append(option)
        if option.name:
            self._longs[option.name] = option
        if option.short:
            self._shorts[option.short] = option
        return option

    @property
    def ignore_unknown(self):
        return self._ignore_unknown

    @ignore_unknown.setter
    def ignore_unknown(self, value):
        self._ignore_unknown = bool(value)

    @property
    def options(self):
        return tuple(self._options)

    @property
    def operands(self):
        return list(self._operands)

    @property
    def width(self):
        """
        The widest help label among visible options (0 when all are hidden).
        """
        return max((option.width for option in self._options if not option.hidden), default=0)

    def find_by_long(self, name, /):
        return self._longs.get(name)

    def find_by_short(self, short, /):
        return self._shorts.get(short)

    def find(self, name, /):
        if (option := self._longs.get(name)) is None and len(name) == 1:
            option = self._shorts.get(name)
        return option

    def has(self, name, /):
        option = self.find(name)
        return option is not None and (option.seen > 0 or option.has_default)

    def count(self, name, /):
        option = self.find(name)
        return option.seen if option is not None else 0

    def get(self, name, /, type=Unset):
        """
        Return the value of option `name`.

        - Option: the last assigned value, or the default.
        - Multi: a new list with every value, in encounter order.
        When `type` is given it must match the declared type exactly
        (list[T] or list for multi options).

        Raises
        - UnknownOptionError: no option is registered under `name`.
        - OptionNotSpecifiedError: flags, and options without any value.
        - WrongTypeCastError: `type` differs from the declared type.
        """
        if (option := self.find(name)) is None:
            raise UnknownOptionError(
                "unknown option %r" % name,
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                name=name,
                hint="query one of: %s" % ", ".join(map(repr, self._longs)) if self._longs else "register the option first",
                docs=getdoc(FaultCode.UNKNOWN_OPTION),
            )
        if not option.has_value:
            raise OptionNotSpecifiedError(
                "option %r has no value" % name,
                title="option not specified",
                code=FaultCode.OPTION_NOT_SPECIFIED,
                name=name,
                hint="check has(%r) before get(), or give the option a default" % name
                if not option.flag else "flags carry no value; use has() or count()",
                docs=getdoc(FaultCode.OPTION_NOT_SPECIFIED),
            )

        match option:
            case Multi():
                if type is not Unset and type is not list and not (
                        typing.get_origin(type) is list and typing.get_args(type) == (option.type,)
                ):
                    raise self._mismatch(name, type, list[option.type])
                return option.values
            case _:
                if type is not Unset and type is not option.type:
                    raise self._mismatch(name, type, option.type)
                return option.value

    @staticmethod
    def _mismatch(name, requested, declared):
        return WrongTypeCastError(
            "option %r holds %s, not %s" % (name, _typename(declared), _typename(requested)),
            title="wrong type cast",
            code=FaultCode.WRONG_TYPE_CAST,
            name=name,
            hint="request the declared type %s" % _typename(declared),
            docs=getdoc(FaultCode.WRONG_TYPE_CAST),
        )

    def __iter__(self):
        return iter(tuple(self._options))

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return f"registry(options={self._options!r}, operands={self._operands!r})"


def _typename(type):
    return type.__name__ if isinstance(type, builtins.type) else repr(type)


__all__ = (
    "Registry",
)
