"""
mcfp utilities (internal helpers shared by every layer)

Overview
- UnsetType / Unset
  • Sentinel for "not provided", distinct from None (None is a legitimate default value).
- coalesce(value, default=None)
  • Materialize Unset into a default while keeping falsey values (0, "", None) intact.
- @rename("name")
  • Name generated helpers (__name__ and __qualname__) for reprs and tracebacks.
- mirror("attr")
  • Read-only property over a private backing field, handing out copies of containers.
- ordinal(number)
  • Human-friendly positions ("first", "second", ..., "11th") for fault messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(0, "fallback")
    0
    >>> ordinal(2)
    'second'
"""
import functools
import types
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    - Falsey, printable as "Unset", sealed against subclassing.
    - UnsetType() always returns the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    # Lets the sentinel stand in for its type in unions: str | Unset.
    def __or__(self, other, /):
        return UnsetType | other if isinstance(other, type | types.UnionType) else NotImplemented

    def __ror__(self, other, /):
        return other | UnsetType if isinstance(other, type | types.UnionType) else NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType is final")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is Unset, in which case return `default`.

    None, 0, "" and empty containers are preserved; only the sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator naming a generated helper, so reprs and tracebacks read well.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError(f"rename() expects a string, got {type(name).__name__}")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detach(object):
    # Fresh containers all the way down; scalars are handed out as they are.
    if isinstance(object, Sequence) and not isinstance(object, str | bytes):
        return list(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property exposing the backing field "_{name}".

    Containers are copied on every read, so callers can never mutate the
    descriptor state (seen counts, accumulated values) behind the parser's back.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Ordinal label for a 1-based position: words up to ten, then "11th", "22nd", ...
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
The "not provided" sentinel. Use it as a parameter default whenever None is a
value the caller may legitimately pass (e.g. an option default of None).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
