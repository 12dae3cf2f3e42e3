"""
Clasp descriptor model.

Overview
- Mode
  • Closed variant of what an option does with its token: SWITCH (presence only),
    VALUE (requires exactly one value) and CATCHALL (captures bare tokens).

- Option
  • One caller-declared option: short key (single character), long name, value
    tag, mode and help text. A help of None marks the option hidden: it still
    matches, but listings skip it.

- SubCommand
  • A named group of options. The base group carries no name and holds the
    options shared by every sub-command.

- Helpers
  • switch(), value(), catchall(): shorthand constructors for the three modes.

Representation
- DescriptorType metaclass derives __typename__ from the class name, exposes the
  names listed in __introspectable__ as read-only properties (see mirror()), and
  provides stable __repr__/__rich_repr__ implementations.

Validation
- Construction only checks types and trims strings; structural rules across a
  whole table (unique names, a single catch-all, tags on value options) belong
  to Parser.verify().

Quick example:
    >>> from clasp.descriptors import switch, value, catchall, SubCommand
    >>> base = SubCommand(options=(
    ...     switch("v", "verbose", help="Verbose output."),
    ...     value("f", "file", "PATH", help="Input file."),
    ... ))
    >>> install = SubCommand("install", (catchall("PACKAGE", help="Packages."),))
"""
import functools
import operator
import re
from enum import Enum

from .utils import *


class DescriptorType(type):
    """
    Metaclass that turns descriptor classes into introspectable value types.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in validation messages.
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the "_name" instance attribute.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(short='v', long='verbose', tag=None, mode=<Mode.SWITCH: 'switch'>, help='...')
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers, in __introspectable__ order.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Mode(Enum):
    """
    What an option does with the argument vector when it matches.

    - SWITCH: presence only, the callback receives no value.
    - VALUE: exactly one value, inline (-fVALUE, --file=VALUE) or from the next token.
    - CATCHALL: receives every token that is not an option; has no names.
    """
    SWITCH = "switch"
    VALUE = "value"
    CATCHALL = "catchall"


def _sanitize_string(cls, field, object, /):
    """
    Internal: validate an optional display string.

    Unset and None both normalize to None; strings are trimmed and must not be
    empty afterwards.
    """
    if object is None or object is Unset:
        return None
    if not isinstance(object, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if not (object := object.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    return object


class Option(metaclass=DescriptorType):
    """
    A single option descriptor.

    Fields
    - short: single character key ("v" for -v), or None.
    - long: long name ("verbose" for --verbose), or None.
    - tag: value label shown in listings ("PATH"); meaningful for VALUE and
      CATCHALL options only.
    - mode: Mode.SWITCH, Mode.VALUE or Mode.CATCHALL.
    - help: help text, or None to hide the option from listings.

    Instances compare by identity, so callbacks can test `option is verbose`.
    """

    __introspectable__ = (
        "short",
        "long",
        "tag",
        "mode",
        "help",
    )

    def __new__(cls, short=Unset, long=Unset, tag=Unset, mode=Mode.SWITCH, help=Unset):
        self = super().__new__(cls)

        if short is not Unset and short is not None:
            if not isinstance(short, str):
                raise TypeError(f"{cls.__typename__} 'short' must be a string")
            if len(short) != 1 or short.isspace():
                raise ValueError(f"{cls.__typename__} 'short' must be a single character")
        self._short = coalesce(short)

        self._long = _sanitize_string(cls, "long", long)
        if self._long is not None and any(character.isspace() for character in self._long):
            raise ValueError(f"{cls.__typename__} 'long' cannot contain whitespace")

        self._tag = _sanitize_string(cls, "tag", tag)

        if not isinstance(mode, Mode):
            raise TypeError(f"{cls.__typename__} 'mode' must be a mode")
        self._mode = mode

        # help is kept verbatim (not trimmed) so authored line breaks survive
        if help is not Unset and help is not None and not isinstance(help, str):
            raise TypeError(f"{cls.__typename__} 'help' must be a string")
        self._help = coalesce(help)

        return self

    @property
    def hidden(self):
        return self._help is None

    def display(self):
        """
        Return the name an end user would have typed: "-v", "--verbose" or the tag.
        """
        if self._short is not None:
            return "-" + self._short
        if self._long is not None:
            return "--" + self._long
        return self._tag or ""


class SubCommand(metaclass=DescriptorType):
    """
    A named group of options; the base group has name None.

    Options are kept in registration order, which is also listing order.
    """

    __introspectable__ = (
        "name",
        "options",
    )

    def __new__(cls, name=Unset, options=()):
        self = super().__new__(cls)
        self._name = _sanitize_string(cls, "name", name)

        if isinstance(options, Option):
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")
        try:
            options = tuple(options)
        except TypeError:
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options") from None
        if not all(isinstance(option, Option) for option in options):
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")
        self._options = options

        return self

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)


def switch(short=Unset, long=Unset, *, help=Unset):
    """
    Build a presence-only option (-v / --verbose).
    """
    return Option(short, long, mode=Mode.SWITCH, help=help)


def value(short=Unset, long=Unset, tag=Unset, *, help=Unset):
    """
    Build an option that requires one value (-f PATH / --file=PATH).
    """
    return Option(short, long, tag, mode=Mode.VALUE, help=help)


def catchall(tag, *, help=Unset):
    """
    Build the catch-all entry that receives every bare token of its group.
    """
    return Option(tag=tag, mode=Mode.CATCHALL, help=help)


__all__ = (
    # Types
    "Mode",
    "Option",
    "SubCommand",

    # Helpers
    "switch",
    "value",
    "catchall",
)
