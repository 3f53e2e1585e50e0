"""Base abstractions for commands and middleware.

Defines the two capability sets the dispatcher works against. Neither
needs a hierarchy beyond the ABC: any class providing the attributes and
the coroutine method can be registered.

Key classes:
    Command: ABC that every command must implement.
    FunctionCommand: Command backed by a plain async function.
    MiddlewareLayer: Flags selecting where a middleware runs.
    Middleware: ABC that every middleware must implement.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable, Sequence

if TYPE_CHECKING:
    from ..context import Context


class Command(ABC):
    """A command that can be invoked by chat message.

    Subclasses set ``invokes`` and implement execute(). Raising from
    execute() is reported as a command_exec error.

    Attributes:
        invokes: Names the command is invoked by. Must be unique across
            all registered commands.
        description: One line shown in the help listing.
        help: Usage text shown by ``help <invoke>``.
        group: Section of the help listing.
        executable_in_dm: Whether the command may run in DM channels.
    """

    invokes: Sequence[str] = ()
    description: str = ""
    help: str = ""
    group: str = "general"
    executable_in_dm: bool = False

    @abstractmethod
    async def execute(self, ctx: "Context") -> None:
        """Run the command."""
        ...


CommandFunc = Callable[["Context"], Awaitable[None]]


class FunctionCommand(Command):
    """Command wrapping an async function taking the Context.

    Args:
        func: async (ctx) -> None
        invokes: Invocation names.
        description: Help listing text.
        help: Detailed usage text.
        group: Help section.
        executable_in_dm: Allow the command in DM channels.
    """

    def __init__(
        self,
        func: CommandFunc,
        invokes: Sequence[str],
        *,
        description: str = "",
        help: str = "",
        group: str = "general",
        executable_in_dm: bool = False,
    ):
        if not invokes:
            raise ValueError("a command needs at least one invoke")
        self.func = func
        self.invokes = tuple(invokes)
        self.description = description
        self.help = help
        self.group = group
        self.executable_in_dm = executable_in_dm

    async def execute(self, ctx: "Context") -> None:
        await self.func(ctx)

    def __repr__(self) -> str:
        return f"FunctionCommand({self.func.__name__!r}, invokes={list(self.invokes)!r})"


class MiddlewareLayer(enum.IntFlag):
    """Points in the dispatch at which middleware can run."""
    BEFORE_COMMAND = 1
    AFTER_COMMAND = 2


class Middleware(ABC):
    """Hook running before and/or after command execution.

    handle() returns True to let the dispatch continue and False to stop
    it silently (e.g. a failed permission check). Raising stops the
    dispatch and is reported as a middleware error.

    Attributes:
        layer: Layers this middleware is subscribed to.
    """

    layer: MiddlewareLayer = MiddlewareLayer.BEFORE_COMMAND

    @abstractmethod
    async def handle(
        self, command: Command, ctx: "Context", layer: MiddlewareLayer
    ) -> bool:
        ...
