"""Invocation name to command mapping.

Populated during setup, read-only once the dispatcher is attached to a
session (see CommandRegistry.seal).
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import structlog

from .commands.base import Command
from .exceptions import DuplicateInvokeError, RegistrationClosedError

logger = structlog.get_logger("commandwire.registry")


class CommandRegistry:
    """Maps invocation names to Command instances.

    Args:
        invoke_to_lower: Lowercase invocations on registration and
            lookup.
    """

    def __init__(self, invoke_to_lower: bool = False):
        self.invoke_to_lower = invoke_to_lower
        self._commands: Dict[str, Command] = {}
        self._instances: List[Command] = []
        self._sealed = False

    def _fold(self, invoke: str) -> str:
        return invoke.lower() if self.invoke_to_lower else invoke

    def register(self, command: Command) -> None:
        """Register a command under all of its invocations.

        Either every invocation is registered or none is.

        Raises:
            DuplicateInvokeError: If an invocation is already taken,
                also when a command repeats one of its own names.
            RegistrationClosedError: If the registry was sealed.
        """
        if self._sealed:
            raise RegistrationClosedError("commands")

        invokes = [self._fold(invoke) for invoke in command.invokes]
        seen: Dict[str, Command] = {}
        for invoke in invokes:
            existing = self._commands.get(invoke) or seen.get(invoke)
            if existing is not None:
                logger.error(
                    "duplicate_invoke",
                    invoke=invoke,
                    existing=type(existing).__name__,
                    rejected=type(command).__name__,
                )
                raise DuplicateInvokeError(invoke, existing, command)
            seen[invoke] = command

        self._instances.append(command)
        self._commands.update(seen)
        logger.debug(
            "command_registered",
            command=type(command).__name__,
            invokes=invokes,
        )

    def lookup(self, invoke: str) -> Optional[Command]:
        """Return the command for invoke, or None."""
        return self._commands.get(self._fold(invoke))

    def seal(self) -> None:
        """Refuse all further registrations."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def command_map(self) -> Mapping[str, Command]:
        """Read-only view of the invocation map."""
        return MappingProxyType(self._commands)

    @property
    def instances(self) -> Tuple[Command, ...]:
        """Distinct registered commands in registration order."""
        return tuple(self._instances)

    def __contains__(self, invoke: str) -> bool:
        return self._fold(invoke) in self._commands

    def __len__(self) -> int:
        return len(self._instances)
