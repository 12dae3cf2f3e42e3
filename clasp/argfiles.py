"""
Clasp argument files.

A token "@path" expands to the entries of a plain text file, one per line:

    verbose
    file=x.txt
    file x.txt

Each line is split on the first "=" when present, otherwise on the first space.
Keys are option names without dashes: a one-character key is a short name,
anything longer a long name. There is no comment or continuation syntax, and an
empty line yields an empty key, which matches nothing.
"""
import contextlib
import logging

from .faults import ArgumentFileError, LineTooLongError, UnknownFileKeyError
from .matching import resolve

logger = logging.getLogger(__name__)

#: Longest accepted line, in characters, line terminator excluded.
MAX_LINE_LENGTH = 1024


def entries(path, /):
    """
    Yield (key, value) pairs from an argument file; value is None without a separator.

    Raises ArgumentFileError when the file cannot be opened or decoded, and
    LineTooLongError for a line over MAX_LINE_LENGTH characters.
    """
    try:
        file = open(path, encoding="utf-8", newline="")
    except OSError:
        raise ArgumentFileError(path) from None

    with file:
        try:
            for lineno, line in enumerate(file, 1):
                line = line.rstrip("\n").rstrip("\r")
                if len(line) > MAX_LINE_LENGTH:
                    raise LineTooLongError(f"{path}:{lineno}")
                key, separator, value = line.partition("=" if "=" in line else " ")
                yield key, value if separator else None
        except UnicodeDecodeError:
            raise ArgumentFileError(path) from None


def load(path, active, base, deliver, /):
    """
    Resolve every entry of an argument file and hand it to deliver(owner, option, value).

    Keys are looked up in the active group, then the base group. The file is
    closed on every exit path, including exceptions raised by deliver.
    """
    logger.debug("expanding argument file %r", path)
    with contextlib.closing(entries(path)) as iterator:
        for key, value in iterator:
            option, owner = resolve(active, base, key)
            if option is None:
                raise UnknownFileKeyError(("-" if len(key) == 1 else "--") + key)
            deliver(owner, option, value)


__all__ = (
    "MAX_LINE_LENGTH",
    "entries",
    "load",
)
