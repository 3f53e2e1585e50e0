"""Typed access to the argument tokens of a command invocation.

Key classes:
    Argument: A single token (a str) with fallible coercion helpers.
    ArgumentList: Immutable, positionally significant sequence of
        Arguments with bounds-safe access and splicing.
"""

import math
import re
from typing import Iterable

from .exceptions import ArgumentParseError

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

_TRUE_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TOKENS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class Argument(str):
    """A raw argument token."""

    __slots__ = ()

    def as_str(self) -> str:
        return str(self)

    def as_int(self) -> int:
        """Parse the token as a base 10 integer with optional sign.

        Raises:
            ArgumentParseError: If the token is not plain decimal digits.
        """
        if not _INT_PATTERN.fullmatch(self):
            raise ArgumentParseError(str(self), "int")
        return int(self)

    def as_float(self) -> float:
        """Parse the token as a 64-bit float.

        Accepts decimal and exponent notation as well as inf/infinity/nan
        spellings. Whitespace and digit separators are rejected.

        Raises:
            ArgumentParseError: If the token is not a float literal or
                overflows a double.
        """
        if not _FLOAT_PATTERN.fullmatch(self):
            raise ArgumentParseError(str(self), "float")
        value = float(self)
        if math.isinf(value) and "inf" not in self.lower():
            raise ArgumentParseError(str(self), "float")
        return value

    def as_bool(self) -> bool:
        """Parse the token as a boolean.

        True for 1, t, T, TRUE, true, True; False for 0, f, F, FALSE,
        false, False. Anything else is an error.
        """
        if self in _TRUE_TOKENS:
            return True
        if self in _FALSE_TOKENS:
            return False
        raise ArgumentParseError(str(self), "bool")


class ArgumentList(tuple):
    """Ordered argument tokens of one invocation.

    Immutable; every transformation returns a new ArgumentList.
    """

    __slots__ = ()

    def __new__(cls, tokens: Iterable[str] = ()):
        return super().__new__(cls, (Argument(t) for t in tokens))

    def __getitem__(self, item):
        result = super().__getitem__(item)
        if isinstance(item, slice):
            return ArgumentList(result)
        return result

    def __eq__(self, other):
        if isinstance(other, list):
            other = tuple(other)
        return super().__eq__(other)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    # Defining __eq__ would otherwise clear the inherited hash
    __hash__ = tuple.__hash__

    def __repr__(self) -> str:
        return f"ArgumentList({list(self)!r})"

    def get(self, index: int) -> Argument:
        """Return the argument at index, or an empty Argument if out of bounds."""
        if index < 0 or index >= len(self):
            return Argument("")
        return super().__getitem__(index)

    def index_of(self, value: str) -> int:
        """Return the first index of value, or -1 if absent."""
        for i, token in enumerate(self):
            if token == value:
                return i
        return -1

    def contains(self, value: str) -> bool:
        return self.index_of(value) > -1

    def splice(self, start: int, count: int) -> "ArgumentList":
        """Return a copy with count elements removed beginning at start.

        A start at or beyond the end returns the list unchanged; a range
        reaching past the end keeps only the elements before start.

        Raises:
            ValueError: If start or count is negative.
        """
        if start < 0 or count < 0:
            raise ValueError("splice start and count must be non-negative")
        length = len(self)
        if start >= length:
            return self
        if start + count >= length:
            return self[:start]
        return ArgumentList(tuple(self[:start]) + tuple(self[start + count:]))

    def join(self, sep: str = " ") -> str:
        return sep.join(self)
