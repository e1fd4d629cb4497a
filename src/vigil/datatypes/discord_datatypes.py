"""
Type-safe wrappers for Discord identifiers.

Discord snowflakes are 64-bit integers that are usually carried around as
strings for JSON and SQLite parity. The wrappers keep ids typed while comparing
equal to their raw ``int``/``str`` values.
"""

from __future__ import annotations

from typing import Union

import discord


class Snowflake:
    """
    Base wrapper storing a snowflake as its canonical decimal string.

    Example:
        >>> uid = UserID(123456789012345678)
        >>> uid.to_int()
        123456789012345678
        >>> uid == "123456789012345678"
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        """
        Args:
            value: The snowflake as a string, int, or wrapper of the same kind.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, type(self)):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    def to_int(self) -> int:
        """Return the integer form used by Discord API calls."""
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class UserID(Snowflake):
    """Snowflake of a Discord user or guild member."""

    __slots__ = ()

    @classmethod
    def from_user(cls, member: Union[discord.Member, discord.User]) -> "UserID":
        return cls(member.id)

