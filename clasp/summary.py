"""
Clasp help, usage and version rendering.

Layout (base view of a parser with sub-commands)

    Usage: pip [COMMAND] PACKAGE...
    <header>

    Sub-commands:
      install

    Default Options:
    -h, --help
      Show help message. ...

    Common options:
    -f PATH, --file=PATH
      Input file.

    <footer>

Palette keys
- program-name, subcommand, option-name, catchall-tag, subtitle, error

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, no escape sequences are emitted at all; when it is
  True, every styled span is closed with a reset before plain output resumes.
"""
import os
import sys
import textwrap
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .descriptors import *
from .matching import find_catchall, find_option

#: Column budget for wrapped help text, indentation included.
WRAP_WIDTH = 78

#: Indentation applied to help text and sub-command names.
INDENT = "  "

_HELP_WITH_SUBCOMMANDS = (
    "Show help message. If this option is used along with a sub-command, "
    "then a help message specific to that sub-command is shown."
)
_HELP_PLAIN = "Show help message."
_VERSION = "Show version and if available, copyright information."


def _styles():
    return defaultdict(str, {
        "program-name": "bold white",
        "subcommand": "bold green",
        "option-name": "bold blue",
        "catchall-tag": "bold yellow",
        "subtitle": "bold dim white",
        "error": "red",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _console(file, colorful):
    """
    Build a console bound to the given sink.

    Markup, emoji and highlighting are disabled so user strings print verbatim,
    and soft wrapping keeps rich from re-flowing lines it did not lay out.
    """
    return Console(
        file=file,
        force_terminal=colorful,
        color_system="standard" if colorful else None,
        no_color=not colorful,
        highlight=False,
        markup=False,
        emoji=False,
        soft_wrap=True,
    )


def _progname(parser):
    return parser.progname or os.path.basename(sys.argv[0] if sys.argv else "")


def _wrap(help):
    """
    Split help text into indented lines of at most WRAP_WIDTH columns.

    Lines break at whitespace only; a word longer than the budget stays whole on
    its own line. Authored line breaks are kept.
    """
    lines = []
    for paragraph in help.splitlines() or [""]:
        chunks = textwrap.wrap(
            paragraph,
            WRAP_WIDTH - len(INDENT),
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(INDENT + chunk for chunk in chunks or [""])
    return [line.rstrip() for line in lines]


def defaults(parser):
    """
    Compute the synthesized default options for a parser.

    Entries are built fresh on every call. A short or long name that the base
    group already declares is left out of the entry, and an entry left with no
    names at all is dropped.
    """
    entries = []

    def entry(short, long, help):
        short = None if find_option(parser.base, short) is not None else short
        long = None if find_option(parser.base, long) is not None else long
        if short is None and long is None:
            return
        entries.append(switch(short, long, help=help))

    if parser.autohelp:
        entry("h", "help", _HELP_WITH_SUBCOMMANDS if parser.subcommands else _HELP_PLAIN)
    if parser.autoversion and parser.version is not None:
        entry("v", "version", _VERSION)

    return entries


def helper(parser, subcommand, file, /):
    """
    Write the usage summary of a sub-command view (base view when None) to file.
    """
    console = _console(file, parser.colorful)
    styles = _styles()

    def styler(style):
        return styles[style] if parser.colorful else ""

    def text(fragment, style=""):
        if not parser.colorful:
            return Text(str(fragment))
        return Text(str(fragment), style)

    def signature(option):
        # "-f PATH, --file=PATH" or "PACKAGE..."
        if option.mode is Mode.CATCHALL:
            return text(f"{option.tag}...", styler("catchall-tag"))
        parts = []
        if option.short is not None and option.short.isalnum():
            parts.append("-" + option.short + (" " + option.tag if option.tag else ""))
        if option.long is not None:
            parts.append("--" + option.long + ("=" + option.tag if option.tag else ""))
        return text(", ".join(parts), styler("option-name"))

    def listing(options):
        for option in options:
            if option.hidden:
                continue
            lines.append(signature(option))
            lines.extend(Text(line) for line in _wrap(option.help))

    base = subcommand is None or subcommand is parser.base
    view = parser.base if base else subcommand
    catchall = find_catchall(view)

    lines = []

    usage = Text.assemble("Usage: ", text(_progname(parser), styler("program-name")))
    if base and parser.subcommands:
        usage.append_text(text(" [COMMAND]", styler("subcommand")))
    if not base:
        usage.append_text(text(" " + view.name, styler("subcommand")))
        usage.append_text(text(" [OPTIONS]", styler("option-name")))
    if catchall is not None:
        usage.append_text(text(f" {catchall.tag}...", styler("catchall-tag")))
    lines.append(usage)

    if parser.header is not None:
        lines.append(Text(parser.header))

    if base and parser.subcommands:
        lines.extend((Text(), text("Sub-commands:", styler("subtitle"))))
        for sub in parser.subcommands:
            lines.append(Text.assemble(INDENT, text(sub.name, styler("subcommand"))))

    if entries := defaults(parser):
        lines.extend((Text(), text("Default Options:", styler("subtitle"))))
        listing(entries)

    lines.extend((Text(), text("Common options:" if base else "Options:", styler("subtitle"))))
    listing(view.options)

    if parser.footer is not None:
        lines.extend((Text(), Text(parser.footer)))

    console.print(Text("\n").join(lines))


def versioner(parser, file, /):
    """
    Write "<progname> <version>" to file.
    """
    console = _console(file, parser.colorful)
    styles = _styles()

    name = Text(_progname(parser))
    if parser.colorful:
        name.stylize(styles["program-name"])

    console.print(Text.assemble(name, " ", parser.version or ""))


__all__ = (
    "WRAP_WIDTH",
    "defaults",
    "helper",
    "versioner",
)
