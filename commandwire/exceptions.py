"""Error classification and exception hierarchy for commandwire.

Dispatch failures are delivered to the configured error reporter together
with an ErrorKind. The exception classes below give every failure raised by
the engine itself a precise type, so callers can catch broadly
(CommandwireError) or per subsystem.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Classification of a failure that aborted a dispatch."""
    GUILD_PREFIX_LOOKUP = "guild_prefix_lookup"        # Guild prefix provider raised
    GET_CHANNEL = "get_channel"                        # Channel could not be resolved
    GET_GUILD = "get_guild"                            # Guild could not be resolved
    COMMAND_NOT_FOUND = "command_not_found"            # No command for the invocation
    NOT_EXECUTABLE_IN_DM = "not_executable_in_dm"      # Command is guild-only
    MIDDLEWARE = "middleware"                          # A middleware raised
    COMMAND_EXEC = "command_exec"                      # The command raised
    DELETE_COMMAND_MESSAGE = "delete_command_message"  # Cleanup of the trigger message failed


class CommandwireError(Exception):
    """Base exception for all commandwire errors.

    Attributes:
        message: Human-readable error description.
        kind: Dispatch classification, when the error is tied to one.
        module: Originating module name (e.g. "registry").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        kind: Optional[ErrorKind] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.kind = kind
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        kind = self.kind.value if self.kind else None
        return f"{cls}({self.message!r}, kind={kind!r}, module={self.module!r})"


# ---------------------------------------------------------------------------
# Setup / configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(CommandwireError):
    """Invalid handler setup, detected before any traffic is processed."""

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(message, module=module or "config", **context)


class DuplicateInvokeError(ConfigurationError):
    """Two commands claim the same invocation name.

    Attributes:
        invoke: The (folded) invocation that is already taken.
        existing: The command currently mapped to it.
        rejected: The command whose registration was refused.
    """

    def __init__(self, invoke: str, existing: Any, rejected: Any) -> None:
        self.invoke = invoke
        self.existing = existing
        self.rejected = rejected
        super().__init__(
            f"invoke '{invoke}' already registered",
            module="registry",
            existing=type(existing).__name__,
            rejected=type(rejected).__name__,
        )


class RegistrationClosedError(ConfigurationError):
    """Registration attempted after the dispatcher was attached to a session."""

    def __init__(self, what: str) -> None:
        super().__init__(
            f"cannot register {what} after handlers were attached",
            module="registry",
        )


# ---------------------------------------------------------------------------
# Dispatch exceptions (passed to the error reporter)
# ---------------------------------------------------------------------------

class DispatchError(CommandwireError):
    """Error produced by the dispatcher itself during message handling."""

    def __init__(
        self,
        message: str = "",
        *,
        kind: Optional[ErrorKind] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, kind=kind, module=module or "dispatch", **context)


class CommandNotFoundError(DispatchError):
    """No command is registered for the parsed invocation."""

    def __init__(self, invoke: str) -> None:
        self.invoke = invoke
        super().__init__(
            "command not found",
            kind=ErrorKind.COMMAND_NOT_FOUND,
            invoke=invoke,
        )


class NotExecutableInDMError(DispatchError):
    """A guild-only command was invoked in a direct message channel."""

    def __init__(self, invoke: str) -> None:
        self.invoke = invoke
        super().__init__(
            "command is not executable in DM channels",
            kind=ErrorKind.NOT_EXECUTABLE_IN_DM,
            invoke=invoke,
        )


# ---------------------------------------------------------------------------
# Value access exceptions (returned to command authors, not classified)
# ---------------------------------------------------------------------------

class ArgumentParseError(CommandwireError, ValueError):
    """An argument token could not be coerced to the requested type.

    Attributes:
        value: The raw token.
        target: Name of the requested type ("int", "float", "bool").
    """

    def __init__(self, value: str, target: str) -> None:
        self.value = value
        self.target = target
        super().__init__(
            f"cannot parse {value!r} as {target}",
            module="arguments",
        )


class ObjectTypeError(CommandwireError, TypeError):
    """A stored object does not have the type requested by the caller."""

    def __init__(self, key: str, expected: Any, actual: Any) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"object '{key}' is {type(actual).__name__}, "
            f"expected {getattr(expected, '__name__', expected)}",
            module="context",
        )
