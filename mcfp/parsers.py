"""
mcfp parsing engines: the fallible core behind Config.

Entry points (each returns the first fault, or None on success)
- parse_arguments(registry, argv): POSIX-like argument vector scanner.
- parse_config(registry, stream): "name = value" text, read character by character.
- parse_config_path(registry, path): open a file, parse it, close it.
- locate_config(registry, option, filename, directories): find a config file
  in an ordered list of directories, honoring a user-supplied file name.

Argument vectors
- argv[0] is the program name and is skipped; a None slot ends the input.
- operands and options may be interleaved; "-" alone is an operand.
- "--" ends option scanning; everything after it is an operand, verbatim.
- "--name=value" and "--name value" attach a value to a long option;
  "--name=" is an empty (hence missing) value and never consumes the next token.
- "-abc" is a cluster of short options; the first value-taking option in it
  takes the rest of the cluster, or the next token when nothing is left.

Config files
- "# ..." comment lines, blank lines, "name", "name=value", "name = value".
- values run verbatim to the end of the line, after leading blanks.
- values never override a single-valued option that already occurred
  (command-line values win); multi options keep accumulating.

Parsing is fail-fast: the first fault stops the call, and whatever was parsed
up to that point stays in the registry.
"""
import copy
import difflib
import io
import itertools
import os
import pathlib
from collections import deque
from enum import IntEnum

from .faults import *
from .utils import *


class _Mode(IntEnum):
    SCANNING_OPTIONS = 1
    OPERANDS_ONLY = 2


class _State(IntEnum):
    NAME_START = 1
    COMMENT = 2
    NAME = 3
    ASSIGN = 4
    VALUE_START = 5
    VALUE = 6


_EOL = ("", "\n", "\r")
_BLANK = " \t"


def _is_name_char(char):
    return bool(char) and (char.isascii() and char.isalnum() or char in "_-")


def _unknown(registry, spelling, name, where, **context):
    suggestions = difflib.get_close_matches(name, [option.name for option in registry.options if option.name], 3)
    try:
        hint = "did you mean %r? unknown options can also be skipped with ignore_unknown=True" % suggestions[0]
    except IndexError:
        hint = "check the spelling, or skip unknown options with ignore_unknown=True"
    return UnknownOptionError(
        "unknown option %r %s" % (spelling, where),
        title="unknown option",
        code=FaultCode.UNKNOWN_OPTION,
        name=name,
        suggestions=suggestions,
        hint=hint,
        docs=getdoc(FaultCode.UNKNOWN_OPTION),
        **context,
    )


def _unexpected(option, where, **context):
    return OptionDoesNotAcceptArgumentError(
        "option %r does not accept an argument %s" % (option.display, where),
        title="option does not accept argument",
        code=FaultCode.OPTION_DOES_NOT_ACCEPT_ARGUMENT,
        name=option.display,
        hint="%r is a flag; give it without a value" % option.display,
        docs=getdoc(FaultCode.OPTION_DOES_NOT_ACCEPT_ARGUMENT),
        **context,
    )


def _missing(option, where, **context):
    return MissingArgumentForOptionError(
        "missing argument for option %r %s" % (option.display, where),
        title="missing argument",
        code=FaultCode.MISSING_ARGUMENT_FOR_OPTION,
        name=option.display,
        hint="give a non-empty value, like %s=VALUE" % option.display
        if option.name else "give a non-empty value, like %sVALUE" % option.display,
        docs=getdoc(FaultCode.MISSING_ARGUMENT_FOR_OPTION),
        **context,
    )


def _apply(option, argument, where, **context):
    """
    Internal: store `argument` in a value-taking option.

    Conversion faults are re-raised with the option and the location added.
    """
    if not argument:
        raise _missing(option, where, **context)
    try:
        option._assign(argument)
    except (InvalidArgumentError, ResultOutOfRangeError) as fault:
        raise copy.replace(
            fault,
            message="%s for option %r %s" % (fault.message, option.display, where),
            name=option.display,
            **context,
        ) from None


def _scan_arguments(registry, argv):
    # Everything up to the first None slot, program name excluded.
    tokens = deque(itertools.takewhile(lambda token: token is not None, itertools.islice(argv, 1, None)))
    mode = _Mode.SCANNING_OPTIONS
    index = 0

    while tokens:
        token = tokens.popleft()
        index += 1

        if mode is _Mode.OPERANDS_ONLY or token == "-" or not token.startswith("-"):
            registry._operands.append(token)
            continue

        if token == "--":
            mode = _Mode.OPERANDS_ONLY
            continue

        where = "at %s position" % ordinal(index)
        start = index

        if token.startswith("--"):
            name, equal, inline = token[2:].partition("=")
            if (option := registry.find_by_long(name)) is None:
                if registry.ignore_unknown:
                    continue
                raise _unknown(registry, "--" + name, name, where, index=start)

            option._see()
            if option.flag:
                if equal:
                    raise _unexpected(option, where, index=start)
                continue

            if equal:
                argument = inline
            elif tokens:
                argument = tokens.popleft()
                index += 1
            else:
                argument = ""
            _apply(option, argument, where, index=start)
            continue

        cluster = token[1:]
        for position, char in enumerate(cluster):
            if (option := registry.find_by_short(char)) is None:
                if registry.ignore_unknown:
                    continue
                raise _unknown(registry, "-" + char, char, where, index=start)

            option._see()
            if option.flag:
                continue

            # A value-taking option ends the cluster.
            if not (argument := cluster[position + 1:]) and tokens:
                argument = tokens.popleft()
                index += 1
            _apply(option, argument, where, index=start)
            break


def parse_arguments(registry, argv, /):
    """
    Scan an argument vector into `registry`.

    Returns
    - None on success.
    - the first fault otherwise: UnknownOptionError, OptionDoesNotAcceptArgumentError,
      MissingArgumentForOptionError, InvalidArgumentError or ResultOutOfRangeError;
      the message names the ordinal position of the offending token.
    """
    try:
        _scan_arguments(registry, argv)
    except ConfigException as fault:
        return fault
    return None


def _resolve(registry, name, value, line):
    where = "at line %d" % line

    if (option := registry.find(name)) is None:
        if registry.ignore_unknown:
            return
        raise _unknown(registry, name, name, where, line=line)

    if option.flag:
        if value:
            raise _unexpected(option, where, line=line)
        option._see()
        return

    if not value:
        raise _missing(option, where, line=line)
    if option.seen and not option.multi:
        return

    option._see()
    _apply(option, value, where, line=line)


def _read_config(registry, stream):
    state = _State.NAME_START
    name = value = ""
    line = 1
    pushback = None

    while True:
        if pushback is not None:
            char, pushback = pushback, None
        else:
            try:
                char = stream.read(1)
            except UnicodeDecodeError as error:
                raise InvalidConfigFileError(
                    "undecodable bytes at line %d" % line,
                    title="invalid config file",
                    code=FaultCode.INVALID_CONFIG_FILE,
                    line=line,
                    hint="config files are UTF-8 encoded",
                    docs=getdoc(FaultCode.INVALID_CONFIG_FILE),
                ) from error
        eol = char in _EOL

        match state:
            case _State.NAME_START:
                if char == "#":
                    state = _State.COMMENT
                elif _is_name_char(char):
                    name = char
                    state = _State.NAME
                elif not eol and char not in _BLANK:
                    raise InvalidConfigFileError(
                        "unexpected character %r at line %d" % (char, line),
                        title="invalid config file",
                        code=FaultCode.INVALID_CONFIG_FILE,
                        line=line,
                        text=char,
                        hint="lines are 'name', 'name = value' or '# comment'",
                        docs=getdoc(FaultCode.INVALID_CONFIG_FILE),
                    )

            case _State.COMMENT:
                if eol:
                    state = _State.NAME_START

            case _State.NAME:
                if _is_name_char(char):
                    name += char
                elif eol:
                    _resolve(registry, name, "", line)
                    state = _State.NAME_START
                else:
                    pushback = char
                    state = _State.ASSIGN

            case _State.ASSIGN:
                if char == "=":
                    state = _State.VALUE_START
                elif eol:
                    _resolve(registry, name, "", line)
                    state = _State.NAME_START
                elif char not in _BLANK:
                    raise InvalidConfigFileError(
                        "unexpected character %r after option name %r at line %d" % (char, name, line),
                        title="invalid config file",
                        code=FaultCode.INVALID_CONFIG_FILE,
                        name=name,
                        line=line,
                        text=char,
                        hint="separate the name and the value with '='",
                        docs=getdoc(FaultCode.INVALID_CONFIG_FILE),
                    )

            case _State.VALUE_START:
                if eol:
                    _resolve(registry, name, "", line)
                    state = _State.NAME_START
                elif char not in _BLANK:
                    value = char
                    state = _State.VALUE

            case _State.VALUE:
                if eol:
                    _resolve(registry, name, value, line)
                    value = ""
                    state = _State.NAME_START
                else:
                    value += char

        if not char:
            break
        if char == "\n":
            line += 1


def parse_config(registry, stream, /):
    """
    Parse config-file text from an open stream into `registry`.

    Byte streams are decoded as UTF-8; undecodable input is an InvalidConfigFileError.
    Returns None on success, else the first fault (its message names the line).
    The stream is read to the end or up to the fault; it is not closed.
    """
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        text = io.TextIOWrapper(stream, encoding="utf-8", newline="")
        try:
            return parse_config(registry, text)
        finally:
            text.detach()
    try:
        _read_config(registry, stream)
    except ConfigException as fault:
        return fault
    return None


def _not_found(path, hint="check the file name and that the file is readable", **context):
    return ConfigFileNotFoundError(
        "config file %r not found" % os.fspath(path),
        title="config file not found",
        code=FaultCode.CONFIG_FILE_NOT_FOUND,
        path=path,
        hint=hint,
        docs=getdoc(FaultCode.CONFIG_FILE_NOT_FOUND),
        **context,
    )


def parse_config_path(registry, path, /):
    """
    Open `path` (UTF-8), parse it into `registry` and close it again.

    A file that cannot be opened is a ConfigFileNotFoundError.
    """
    try:
        stream = open(path, encoding="utf-8")
    except OSError:
        return _not_found(path)
    with stream:
        return parse_config(registry, stream)


def locate_config(registry, option, filename, directories, /):
    """
    Parse the first `directory/filename` that opens, trying `directories` in order.

    The value of `option` replaces `filename` when the option has a non-empty value.
    Finding nothing is only a fault (ConfigFileNotFoundError) when the user gave
    the option explicitly; a missing default file is not an error.
    """
    directories = tuple(directories)
    if (found := registry.find(option)) is not None and not found.flag and not found.multi and (value := found.value):
        filename = os.fspath(value) if isinstance(value, os.PathLike) else str(value)

    for directory in directories:
        try:
            stream = open(pathlib.Path(directory) / filename, encoding="utf-8")
        except OSError:
            continue
        with stream:
            return parse_config(registry, stream)

    if registry.count(option):
        return _not_found(
            filename,
            name=option,
            directories=directories,
            hint="looked in: %s" % ", ".join(map(repr, map(os.fspath, directories))) if directories else "no directory to look in",
        )
    return None


__all__ = (
    "parse_arguments",
    "parse_config",
    "parse_config_path",
    "locate_config",
)
