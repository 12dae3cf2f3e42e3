"""
Clasp matching engine.

Resolves raw tokens to descriptors. Lookups are exact and case-sensitive; there
is no prefix or abbreviation matching.

- find_subcommand(subcommands, name): pick a sub-command by name.
- find_option(subcommand, key): a one-character key matches a short name,
  anything longer matches a long name. Catch-alls never match by name.
- find_catchall(subcommand): the group's catch-all entry, if any.
- resolve(active, base, key): look in the active group first, then fall back to
  the base group, returning the owning group with the option.
"""
from .descriptors import Mode


def find_subcommand(subcommands, name, /):
    for subcommand in subcommands:
        if subcommand.name is not None and subcommand.name == name:
            return subcommand
    return None


def find_option(subcommand, key, /):
    if not key:
        return None
    for option in subcommand.options:
        if option.mode is Mode.CATCHALL:
            continue
        if len(key) == 1:
            if option.short == key:
                return option
        elif option.long == key:
            return option
    return None


def find_catchall(subcommand, /):
    for option in subcommand.options:
        if option.mode is Mode.CATCHALL:
            return option
    return None


def resolve(active, base, key, /):
    """
    Resolve a key against the active group, then the base group.

    Returns (option, owner) where owner is the group the option was found in,
    or (None, None) when neither scope declares the key.
    """
    if (option := find_option(active, key)) is not None:
        return option, active
    if active is not base and (option := find_option(base, key)) is not None:
        return option, base
    return None, None


__all__ = (
    "find_subcommand",
    "find_option",
    "find_catchall",
    "resolve",
)
