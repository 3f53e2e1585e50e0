"""Prefix resolution, tokenization and invocation extraction.

Key functions:
    resolve_prefix: Pick the global or guild prefix a message used.
    tokenize: Quote-aware split of message text.
    split_invocation: Separate the invocation name from its arguments.
"""

import inspect
import re
from typing import Awaitable, Callable, List, Tuple, Union

# The whitespace class is limited to the ASCII set \t \n \f \r and space.
_TOKEN_PATTERN = re.compile(r'(?:[^\t\n\f\r "]+|"[^"]*")+')

# (guild_id) -> prefix, "" for none. May be a coroutine function.
GuildPrefixGetter = Callable[[str], Union[str, Awaitable[str]]]


async def resolve_prefix(
    content: str, general_prefix: str, guild_id: str, guild_prefix_getter: GuildPrefixGetter
) -> str:
    """Return the prefix content starts with, or "" if it has none.

    The general prefix always wins. The guild prefix getter is only
    consulted when the general prefix does not match; anything it raises
    propagates to the caller.
    """
    if content.startswith(general_prefix):
        return general_prefix

    guild_prefix = guild_prefix_getter(guild_id)
    if inspect.isawaitable(guild_prefix):
        guild_prefix = await guild_prefix

    if guild_prefix and content.startswith(guild_prefix):
        return guild_prefix
    return ""


def tokenize(content: str) -> List[str]:
    """Split content into tokens.

    A token is a run of non-whitespace characters, where double-quoted
    sections may contain whitespace. All double quotes are removed from
    the resulting tokens.

        >>> tokenize('!ban "John Doe" 10')
        ['!ban', 'John Doe', '10']
    """
    tokens = _TOKEN_PATTERN.findall(content)
    return [t.replace('"', "") if '"' in t else t for t in tokens]


def split_invocation(
    tokens: List[str], prefix: str, space_after_prefix: bool = False
) -> Tuple[str, List[str]]:
    """Return (invoke, args) for a tokenized message.

    With space_after_prefix the prefix is its own token and the invoke is
    the second token. Otherwise the invoke is the first token without
    the prefix.
    """
    if not tokens:
        return "", []

    if space_after_prefix:
        if len(tokens) > 1:
            return tokens[1], tokens[2:]
        return "", tokens[1:]

    return tokens[0][len(prefix):], tokens[1:]
