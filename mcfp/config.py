"""
mcfp Config: the raising convenience layer over Registry and the parsers.

What it adds on top of the fallible core
- One object owning a Registry plus the usage line.
- Faults are surfaced through trigger(): raised by default, or, in shell mode,
  the help text and the rendered fault go to stderr and the process exits 1.
- Help rendering (a rich renderable) with a consistent description column.

Quick start
    from mcfp import Config, make_option

    config = Config(
        "usage: tool [options] file...",
        make_option("verbose,v", descr="more output"),
        make_option("level", default=1, descr="compression level"),
        make_option("config", str, descr="alternative config file"),
        shell=True,
    )
    config.parse()
    config.parse_config_file("config", "tool.conf", [".", "/etc"])
    if config.has("verbose"):
        ...

Help layout
- the usage line, then one line per visible option: "  label", padded to a
  column as wide as the widest label (at most half the terminal), followed by
  the description wrapped at the remaining width. A label too wide for the
  column gets its description on the next line.
"""
import functools
import os.path
import sys
from collections import defaultdict

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .faults import *
from .parsers import *
from .registry import Registry
from .utils import *


class Config:
    """
    Parse session facade: registry, parse entry points, queries and help.

    Runtime options
    - ignore_unknown: skip unknown options instead of failing (settable).
    - prog: program name shown in fault headers (defaults to argv[0]).
    - shell: print help + fault to stderr and exit(1) instead of raising.
    - fancy: draw help and faults inside panels.
    - colorful: style help and faults (plain text when False).
    """

    def __init__(
            self,
            usage="",
            /,
            *options,
            ignore_unknown=False,
            prog=Unset,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(usage, str):
            raise TypeError("Config() usage must be a string")
        self._usage = usage
        self._registry = Registry(*options, ignore_unknown=ignore_unknown)
        self._prog = prog
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    @classmethod
    @functools.cache
    def instance(cls):
        """
        Process-wide convenience instance, created empty on first use.

        Call init() on it to declare the options. Independent Config objects
        are always an alternative; nothing in mcfp relies on this one.
        """
        return cls()

    def init(self, usage, /, *options):
        """
        Replace the usage line and the option set, dropping all parse state.
        """
        if not isinstance(usage, str):
            raise TypeError("init() usage must be a string")
        self._usage = usage
        self._registry = Registry(*options, ignore_unknown=self._registry.ignore_unknown)

    @property
    def registry(self):
        return self._registry

    @property
    def usage(self):
        return self._usage

    @usage.setter
    def usage(self, value):
        if not isinstance(value, str):
            raise TypeError("usage must be a string")
        self._usage = value

    @property
    def ignore_unknown(self):
        return self._registry.ignore_unknown

    @ignore_unknown.setter
    def ignore_unknown(self, value):
        self._registry.ignore_unknown = value

    @property
    def prog(self):
        return self._prog

    @property
    def shell(self):
        return self._shell

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    def trigger(self, fault, /, **options):
        """
        Surface `fault` with this configuration's runtime options merged in.

        In shell mode the help text is printed to stderr before the fault.
        """
        if self._shell:
            self.print_help(Console(stderr=True))
        trigger(
            fault,
            **options,
            prog=coalesce(self._prog),
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )

    def parse(self, argv=Unset, /):
        """
        Parse an argument vector (sys.argv by default; argv[0] is skipped).
        """
        if fault := parse_arguments(self._registry, sys.argv if argv is Unset else argv):
            self.trigger(fault)

    def parse_config_file(self, *arguments):
        """
        Parse config-file text into the registry.

        Forms
        - parse_config_file(stream): an open text or UTF-8 byte stream (left open).
        - parse_config_file(path): a file path; it must exist.
        - parse_config_file(option, filename, directories): look for the file
          named by `option` (or `filename`) in `directories`, in order.
        """
        match arguments:
            case (source,) if hasattr(source, "read"):
                fault = parse_config(self._registry, source)
            case (source,):
                fault = parse_config_path(self._registry, source)
            case (option, filename, directories):
                fault = locate_config(self._registry, option, filename, directories)
            case _:
                raise TypeError("parse_config_file() takes 1 or 3 arguments but %d were given" % len(arguments))
        if fault:
            self.trigger(fault)

    def has(self, name, /):
        return self._registry.has(name)

    def count(self, name, /):
        return self._registry.count(name)

    def get(self, name, /, type=Unset):
        return self._registry.get(name, type)

    @property
    def operands(self):
        return self._registry.operands

    def print_help(self, console=Unset, /):
        console = Console() if console is Unset else console
        console.print(self)

    def __rich_console__(self, console, options):
        """
        Render the help text for `console`.

        Palette keys
        - usage-section, option-name, flag-name, argument-description, panel-title

        A __styles__ mapping in __main__ overrides any palette entry; with
        colorful=False everything is printed unstyled.
        """
        styles = defaultdict(str, {
            "usage-section": "bold #36C5F0",  # sky-blue usage line
            "option-name": "bold #00E6FF",  # cyan for value-taking options
            "flag-name": "bold #22C55E",  # green for flags
            "argument-description": "#9CA3AF",  # muted gray
            "panel-title": "bold #FF4D94",  # magenta branding
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not self._colorful:
                return Text(fragment.plain if isinstance(fragment, Text) else str(fragment))
            if isinstance(fragment, Text):
                return fragment.copy()
            return Text(str(fragment), styles[style])

        width = options.max_width - 4 * self._fancy  # panel borders and padding
        column = min(self._registry.width, width // 2)

        section = Text()
        if self._usage:
            section.append(text(self._usage, "usage-section")).append("\n")

        for option in self._registry:
            if option.hidden:
                continue
            if section:
                section.append("\n")
            section.append("  ").append(text(option.label, "flag-name" if option.flag else "option-name"))
            if option.descr is None:
                continue

            if option.width > column:
                section.append("\n").append(" " * column)
            else:
                section.append(" " * (column - option.width + 2))

            wrapped = text(option.descr, "argument-description").wrap(console, max(width - column, 1))
            for index, line in enumerate(wrapped):
                if index:
                    section.append("\n").append(" " * column)
                section.append(line)

        renderable = section
        if self._fancy:
            prog = coalesce(self._prog) or os.path.basename(sys.argv[0]) or "mcfp"
            renderable = Panel(
                section,
                title=Text.assemble("[ ", "%s HELP" % prog.upper(), " ]", style=styles["panel-title"] if self._colorful else ""),
                title_align="left",
            )
        yield renderable

    def __repr__(self):
        return f"config(usage={self._usage!r}, registry={self._registry!r})"


__all__ = (
    "Config",
)
