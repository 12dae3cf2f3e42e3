"""
Clasp faults (outcomes and parse errors) and rendering.

Scope
- Outcome: stable numeric results of a parse, shared with callers that turn them
  into process exit statuses.
- ParseFault: base type for every way a parse can stop early. Each subclass
  carries the outcome it maps to and knows how to render its one-line
  diagnostic, with the offending token in the error style.
- trigger(): merge runtime options (sink, colorful) into a fault, write its
  diagnostic and return its outcome.

Integration
- The parse loop raises faults where a problem is detected and handles them in
  one place through trigger(); callers only ever see an Outcome.
- Palette entries can be overridden via __styles__ in __main__ (key "error").
"""
import copy
import difflib
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .summary import _console, _styles
from .utils import Unset


class Outcome(IntEnum):
    """
    result of a parse.

    - OK: all tokens consumed, or parsing stopped at "--".
    - HELP_EXIT: help or version text was written; nothing else was parsed.
    - INVALID: malformed or unknown token, missing value, or a reused parser.
    - CALLBACK_FAILED: the callback rejected an option.
    - BAD_SUBCOMMAND: an unknown sub-command where one is required.
    - BAD_ARG: an argument file could not be read or held an unknown key.
    """
    OK = 0
    HELP_EXIT = 1
    INVALID = -1
    CALLBACK_FAILED = -2
    BAD_SUBCOMMAND = -3
    BAD_ARG = -4


class ParseFault(Exception):
    """
    base parse fault.

    the message is the offending token (option name, argument, path); options
    hold rendering context such as colorful, output and hint. subclasses define
    the outcome and the diagnostic template around the message; a template of
    None marks a silent fault.
    """
    outcome = Outcome.INVALID
    template = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def silent(self):
        return self.template is None

    def __rich__(self):
        styles = _styles()
        colorful = self.options.get("colorful", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), style)

        if self.silent:
            return Text()

        prefix, _, suffix = self.template.partition("{}")
        diagnostic = Text.assemble(prefix, text(self.message, styler("error")), suffix)
        if hint := self.options.get("hint"):
            diagnostic.append_text(Text(f" (did you mean {hint!r}?)"))
        return diagnostic

    def __str__(self):
        return self.__rich__().plain if not self.silent else type(self).__name__

    def __trigger__(self):
        if not self.silent:
            output = self.options.get("output")
            _console(sys.stderr if output is None else output, self.options.get("colorful", False)).print(self)
        return self.outcome

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ReparseError(ParseFault): ...


class InvalidOptionError(ParseFault):
    template = "Invalid option: {}"


class MissingValueError(ParseFault):
    template = "Missing required value for {}"


class UnrecognizedArgumentError(ParseFault):
    template = "Unrecognized argument: {}"


class CallbackFailedError(ParseFault):
    outcome = Outcome.CALLBACK_FAILED


class UnknownSubcommandError(ParseFault):
    outcome = Outcome.BAD_SUBCOMMAND
    template = "Unknown sub-command: {}"


class ArgumentFileError(ParseFault):
    outcome = Outcome.BAD_ARG
    template = "Arguments file '{}' could not be opened."


class LineTooLongError(ParseFault):
    outcome = Outcome.BAD_ARG
    template = "Argument file line too long: {}"


class UnknownFileKeyError(ParseFault):
    outcome = Outcome.BAD_ARG
    template = "Invalid option: {}"


def suggest(word, possibilities, /):
    """
    return the closest match for word among possibilities, or None.
    """
    matches = difflib.get_close_matches(word, possibilities, n=1)
    return matches[0] if matches else None


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options and return its outcome.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault).
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - output: writable sink for the diagnostic (None selects stderr).
    - colorful: whether the diagnostic carries escape sequences.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return copy.replace(fault, **options).__trigger__()


__all__ = (
    "Outcome",
    "ParseFault",
    "ReparseError",
    "InvalidOptionError",
    "MissingValueError",
    "UnrecognizedArgumentError",
    "CallbackFailedError",
    "UnknownSubcommandError",
    "ArgumentFileError",
    "LineTooLongError",
    "UnknownFileKeyError",
    "trigger",
)
