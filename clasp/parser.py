"""
Clasp parser: configuration and the parse loop.

Overview
- Parser
  • Holds the caller's configuration: display strings, the base group,
    sub-commands, the callback, the output sink, opaque userdata, and the
    autohelp/autoversion/colorful/required flags.
  • parse(argv) walks the argument vector once, left to right, invoking
    callback(parser, subcommand, option, value) for every match, and returns an
    Outcome.
  • summary(subcommand) writes the usage summary of a view.
  • verify() asserts table consistency; it is meant for debug builds and
    disappears under python -O.

Parse stages
  1. Guard: a parser that already consumed tokens refuses to parse again until
     reset() is called.
  2. Sub-command detection: a first token starting with an alphanumeric
     character selects a sub-command by exact name.
  3. Help/version pre-scan: "-h"/"--help" and "-v"/"--version" anywhere in the
     remaining vector win over everything else, unless the base group declares
     that name itself.
  4. Main loop: short clusters (-abc, -fVALUE), long options (--file=VALUE,
     --file VALUE), argument files (@path), "--" to stop, and bare tokens for
     the active group's catch-all.

Errors
- Problems raise a ParseFault inside the loop; parse() handles it once, writes
  the diagnostic and returns the fault's outcome. Callbacks delivered before the
  fault are not rolled back. Exceptions raised by the callback itself propagate.

Quick example:
    >>> from clasp import Parser, SubCommand, switch, value
    >>> def callback(parser, subcommand, option, value):
    ...     print(option.long, value)
    >>> parser = Parser("prog", base=SubCommand(options=(
    ...     switch("v", "verbose", help="Verbose output."),
    ...     value("f", "file", "PATH", help="Input file."),
    ... )), callback=callback)
    >>> parser.parse(["prog", "-v", "--file=x.txt"])
"""
import logging
import shlex
import sys
from collections.abc import Iterable

from . import argfiles, summary
from .descriptors import DescriptorType, Mode, SubCommand
from .faults import *
from .faults import suggest
from .matching import *
from .utils import *

logger = logging.getLogger(__name__)


class ParseState:
    """
    Mutable progress of a parse: the cursor into the vector and the active group.
    """
    __slots__ = ("cursor", "active")

    def __init__(self, active):
        self.cursor = 0
        self.active = active

    def __repr__(self):
        return f"ParseState(cursor={self.cursor!r}, active={self.active!r})"


def _process_strings(cls, metadata):
    """
    Normalize optional display strings: trimmed, non-empty, Unset becomes None.
    """
    for name in ("progname", "header", "footer", "version"):
        if not isinstance(object := metadata[name], str | Unset | None):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_groups(cls, metadata):
    if (base := metadata["base"]) is Unset:
        metadata["base"] = SubCommand()
    elif not isinstance(base, SubCommand):
        raise TypeError(f"{cls.__typename__} 'base' must be a sub-command")

    if not isinstance(subcommands := metadata["subcommands"], Iterable) or isinstance(subcommands, SubCommand | str):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of sub-commands")
    subcommands = tuple(subcommands)
    if not all(isinstance(subcommand, SubCommand) for subcommand in subcommands):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of sub-commands")
    metadata["subcommands"] = subcommands


def _process_runtime(cls, metadata):
    if not isinstance(callback := metadata["callback"], Unset | None) and not callable(callback):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")
    metadata["callback"] = coalesce(callback)

    if (output := metadata["output"]) is not None and not callable(getattr(output, "write", None)):
        raise TypeError(f"{cls.__typename__} 'output' must be a writable stream")


def _arguments(argv, /):
    """
    Normalize a parse() argument into a list of tokens, program name first.
    """
    if argv is Unset:
        return list(sys.argv)
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        arguments = list(argv)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return arguments
    raise TypeError("parse() argument must be a string or an iterable of strings")


class Parser(metaclass=DescriptorType):
    """
    Command-line parser configuration and entry point.

    Parameters
    - progname, header, footer, version: optional display strings. When progname
      is not given, the basename of sys.argv[0] is shown.
    - base: SubCommand holding the options shared by every sub-command.
    - subcommands: iterable of named SubCommand groups.
    - callback: callable(parser, subcommand, option, value); a truthy return
      stops the parse with Outcome.CALLBACK_FAILED.
    - output: sink with write(); None sends help to stdout and diagnostics to stderr.
    - userdata: opaque value for the callback, never inspected.
    - autohelp / autoversion: handle -h/--help and -v/--version automatically.
    - colorful: emit ANSI styles in rendered output.
    - required: an unknown alphanumeric first token is an error instead of being
      handed to the catch-all.
    """

    __introspectable__ = (
        "progname",
        "header",
        "footer",
        "version",
        "base",
        "subcommands",
        "callback",
        "output",
        "autohelp",
        "autoversion",
        "colorful",
        "required",
    )

    def __new__(
            cls,
            progname=Unset,
            header=Unset,
            footer=Unset,
            version=Unset,
            base=Unset,
            subcommands=(),
            callback=Unset,
            output=None,
            userdata=None,
            *,
            autohelp=False,
            autoversion=False,
            colorful=False,
            required=False,
    ):
        metadata = {
            "progname": progname,
            "header": header,
            "footer": footer,
            "version": version,
            "base": base,
            "subcommands": subcommands,
            "callback": callback,
            "output": output,
            "userdata": userdata,
            "autohelp": bool(autohelp),
            "autoversion": bool(autoversion),
            "colorful": bool(colorful),
            "required": bool(required),
        }
        _process_strings(cls, metadata)
        _process_groups(cls, metadata)
        _process_runtime(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._state = ParseState(self._base)
        return self

    @property
    def userdata(self):
        return self._userdata

    @property
    def cursor(self):
        return self._state.cursor

    @property
    def active(self):
        return self._state.active

    def reset(self):
        """
        Forget the previous parse so the parser can run again.
        """
        self._state = ParseState(self._base)

    def summary(self, subcommand=None):
        """
        Write the usage summary of a sub-command (the base view when None).
        """
        if subcommand is not None and not isinstance(subcommand, SubCommand):
            raise TypeError("summary() argument must be a sub-command")
        summary.helper(self, subcommand, sys.stdout if self._output is None else self._output)

    def verify(self):
        """
        Assert that the option tables are consistent.

        Checks the callback and the groups are set, that autoversion comes with
        a version string, that sub-command names are present and unique, and
        that each group's options are well-formed with at most one catch-all.
        """
        assert self._callback is not None, "callback is not set"
        assert self._base.options or self._subcommands, "neither base options nor sub-commands are defined"
        assert not self._autoversion or self._version is not None, "autoversion requires a version string"
        assert self._base.name is None, "base group cannot be named"

        names = set()
        for subcommand in self._subcommands:
            assert subcommand.name is not None, "sub-command without a name"
            assert subcommand.name not in names, f"duplicated sub-command {subcommand.name!r}"
            names.add(subcommand.name)

        for group in (self._base, *self._subcommands):
            catchalls = 0
            for option in group.options:
                match option.mode:
                    case Mode.VALUE:
                        assert option.tag is not None, f"value option {option.display()!r} has no tag"
                        assert option.short is not None or option.long is not None, "value option without a name"
                    case Mode.SWITCH:
                        assert option.short is not None or option.long is not None, "switch without a name"
                    case Mode.CATCHALL:
                        assert option.tag is not None, "catch-all without a tag"
                        assert option.short is None and option.long is None, "catch-all cannot have names"
                        catchalls += 1
            assert catchalls <= 1, f"more than one catch-all in {group.name or 'base group'!r}"

    def parse(self, argv=Unset):
        """
        Parse an argument vector (program name first) and return an Outcome.

        argv
        - Unset: sys.argv.
        - str: split with shlex.split.
        - Iterable[str]: used as-is.
        """
        arguments = _arguments(argv)
        try:
            outcome = self._parse(arguments)
        except ParseFault as fault:
            outcome = trigger(fault, output=self._output, colorful=self._colorful)
        logger.debug("parse finished with %s at cursor %d", outcome.name, self._state.cursor)
        return outcome

    def _deliver(self, owner, option, value):
        if self._callback is None:
            return
        if self._callback(self, owner, option, value):
            raise CallbackFailedError()

    def _parse(self, arguments):
        state = self._state
        if state.cursor != 0:
            raise ReparseError()

        if len(arguments) < 2:
            return Outcome.OK
        state.cursor = 1

        self._detect(arguments)
        if (outcome := self._prescan(arguments)) is not None:
            return outcome

        while state.cursor < len(arguments):
            token = arguments[state.cursor]
            state.cursor += 1

            if len(token) > 1 and token[0] == "-" and token[1].isalnum():
                self._short(token, arguments)
            elif len(token) > 2 and token.startswith("--") and token[2].isalnum():
                self._long(token, arguments)
            elif token.startswith("@"):
                argfiles.load(token[1:], state.active, self._base, self._deliver)
            elif token == "--":
                break
            elif (catchall := find_catchall(state.active)) is not None:
                self._deliver(state.active, catchall, token)
            else:
                raise UnrecognizedArgumentError(token)

        return Outcome.OK

    def _detect(self, arguments):
        state = self._state
        token = arguments[state.cursor]
        if not self._subcommands or not token[:1].isalnum():
            return

        if (subcommand := find_subcommand(self._subcommands, token)) is None:
            if self._required:
                names = [sub.name for sub in self._subcommands]
                raise UnknownSubcommandError(token, hint=suggest(token, names))
            return

        logger.debug("selected sub-command %r", subcommand.name)
        state.active = subcommand
        state.cursor += 1
        self._deliver(subcommand, None, None)

    def _prescan(self, arguments):
        """
        Look for help/version requests anywhere in the remaining tokens.

        Only the base group can shadow the automatic names.
        """
        sink = sys.stdout if self._output is None else self._output
        for token in arguments[self._state.cursor:]:
            if self._autohelp and (
                (token == "-h" and find_option(self._base, "h") is None) or
                (token == "--help" and find_option(self._base, "help") is None)
            ):
                summary.helper(self, self._state.active, sink)
                return Outcome.HELP_EXIT
            if self._autoversion and self._version is not None and (
                (token == "-v" and find_option(self._base, "v") is None) or
                (token == "--version" and find_option(self._base, "version") is None)
            ):
                summary.versioner(self, sink)
                return Outcome.HELP_EXIT
        return None

    def _value(self, arguments, name):
        state = self._state
        if state.cursor >= len(arguments):
            raise MissingValueError(name)
        state.cursor += 1
        return arguments[state.cursor - 1]

    def _short(self, token, arguments):
        state = self._state
        for index in range(1, len(token)):
            key = token[index]
            option, owner = resolve(state.active, self._base, key)
            if option is None:
                raise InvalidOptionError("-" + key)
            if option.mode is Mode.VALUE:
                rest = token[index + 1:]
                self._deliver(owner, option, rest if rest else self._value(arguments, "-" + key))
                return
            self._deliver(owner, option, None)

    def _long(self, token, arguments):
        state = self._state
        key, separator, inline = token[2:].partition("=")
        option, owner = resolve(state.active, self._base, key)
        if option is None:
            raise InvalidOptionError("--" + key)
        if option.mode is Mode.VALUE:
            self._deliver(owner, option, inline if separator else self._value(arguments, "--" + key))
            return
        if separator:
            logger.debug("ignoring inline value %r of switch --%s", inline, key)
        self._deliver(owner, option, None)


def parse(parser, argv=Unset, /):
    """
    Convenience runner: parse argv with parser and return the Outcome.

    Raises
    - TypeError: when parser does not provide a parse() method.
    """
    if not hasattr(parser, "parse") or not callable(parser.parse):
        raise TypeError("parse() first argument must be a parser")
    return parser.parse(argv)


__all__ = (
    "Parser",
    "ParseState",
    "parse",
)
