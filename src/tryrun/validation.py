"""Package-name validation performed before any side effect.

The grammar follows the registry identifier rules: an ASCII letter or digit, then any
number of ASCII letters, digits, ``_`` or ``-``. It keeps the name from being read as a
command-line flag or a path fragment when it is later used to build the install command
and to match file names.
"""

from __future__ import annotations

from typing import Final

from tryrun.errors import InvalidPackageName

_ASCII_ALNUM: Final[frozenset[str]] = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
)
_TAIL_EXTRA: Final[frozenset[str]] = frozenset("_-")


def validate_package_name(name: object) -> bool:
    """Return ``True`` when ``name`` satisfies the package identifier grammar."""

    if not isinstance(name, str) or not name:
        return False
    first, rest = name[0], name[1:]
    if first not in _ASCII_ALNUM:
        return False
    return all(char in _ASCII_ALNUM or char in _TAIL_EXTRA for char in rest)


def require_valid_package_name(name: str) -> str:
    """Return ``name`` unchanged or raise :class:`InvalidPackageName`."""

    if not validate_package_name(name):
        raise InvalidPackageName(name)
    return name


__all__ = ["require_valid_package_name", "validate_package_name"]
