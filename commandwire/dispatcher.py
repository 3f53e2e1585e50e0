"""Command dispatcher.

Routes inbound chat messages to registered commands: filters the
message, resolves the prefix, channel and guild, parses the invocation,
then runs the before-layer middleware, the command, the after-layer
middleware and the optional cleanup. Every aborting failure is reported
once through the configured error reporter with its ErrorKind.

Key classes:
    Dispatcher: Public registration API and per-message orchestration.
    DispatchResult: Where a dispatch ended.
"""

import enum
import inspect
from functools import partial
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

import structlog

from .arguments import ArgumentList
from .commands.base import Command, CommandFunc, FunctionCommand, Middleware, MiddlewareLayer
from .config import HandlerConfig
from .context import OBJECT_KEY_HANDLER, Context, ObjectStore
from .exceptions import (
    CommandNotFoundError,
    ErrorKind,
    NotExecutableInDMError,
    RegistrationClosedError,
)
from .middleware import LayerResult, MiddlewarePipeline
from .parsing import resolve_prefix, split_invocation, tokenize
from .platform import EventType, Message, Session
from .registry import CommandRegistry

logger = structlog.get_logger("commandwire.dispatch")

T = TypeVar("T")

# Shortest content that can hold a prefix and an invocation
MIN_CONTENT_LENGTH = 2


class DispatchResult(str, enum.Enum):
    """Outcome of Dispatcher.handle_message."""
    IGNORED = "ignored"          # Filtered before prefix resolution
    NO_PREFIX = "no_prefix"      # Not a command invocation
    DM_DISABLED = "dm_disabled"  # DM channel while allow_dm is off
    ERROR = "error"              # Failure reported to the error reporter
    STOPPED = "stopped"          # A middleware stopped the dispatch silently
    COMPLETED = "completed"      # Command executed


_LAYER_RESULTS = {
    LayerResult.STOPPED: DispatchResult.STOPPED,
    LayerResult.FAILED: DispatchResult.ERROR,
}


def log_dispatch_error(ctx: Context, kind: ErrorKind, error: BaseException) -> None:
    """Default error reporter: log the failure."""
    logger.warning(
        "dispatch_error",
        kind=kind.value,
        error=str(error),
        error_type=type(error).__name__,
        invoke=ctx.invoke or None,
        channel_id=ctx.message.channel_id,
        message_id=ctx.message.id,
    )


def _no_guild_prefix(guild_id: str) -> str:
    return ""


def _from_state(lookup: Callable[[str], Optional[T]], object_id: str) -> Optional[T]:
    """Read the session cache; a failing cache counts as a miss."""
    try:
        return lookup(object_id)
    except Exception as e:
        logger.debug(
            "state_lookup_failed",
            lookup=getattr(lookup, "__name__", repr(lookup)),
            object_id=object_id,
            error=str(e),
        )
        return None


class Dispatcher:
    """Command registry, middleware pipeline and message dispatch.

    Commands and middleware are registered during setup. Calling
    register_handlers() attaches the dispatcher to a session and seals
    both, so the structures read during dispatch never change while
    messages are processed.

    Args:
        config: Handler configuration. Defaults to HandlerConfig().
    """

    def __init__(self, config: Optional[HandlerConfig] = None):
        self._config = config or HandlerConfig()
        self._on_error = self._config.on_error or log_dispatch_error
        self._guild_prefix_getter = self._config.guild_prefix_getter or _no_guild_prefix

        self._registry = CommandRegistry(invoke_to_lower=self._config.invoke_to_lower)
        self._pipeline = MiddlewarePipeline(report_error=self._report_error)
        self._objects = ObjectStore()
        self._unsubscribers: List[Callable[[], None]] = []

        if self._config.use_default_help_command:
            from .commands.help import HelpCommand
            self.register_command(HelpCommand())

    # --- Registration ---

    def register_command(self, command: Command) -> None:
        """Register a command.

        Raises:
            DuplicateInvokeError: If one of its invocations is taken.
            RegistrationClosedError: After register_handlers().
        """
        self._registry.register(command)

    def command(
        self,
        *invokes: str,
        description: str = "",
        help: str = "",
        group: str = "general",
        executable_in_dm: bool = False,
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator registering an async function as a FunctionCommand.

        Usage::

            @dispatcher.command("ping", description="Pong!")
            async def ping(ctx):
                await ctx.reply("pong")
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            self.register_command(FunctionCommand(
                func,
                invokes or (func.__name__,),
                description=description,
                help=help,
                group=group,
                executable_in_dm=executable_in_dm,
            ))
            return func
        return decorator

    def register_middleware(self, middleware: Middleware) -> None:
        """Register a middleware; runs after all earlier ones.

        Raises:
            RegistrationClosedError: After register_handlers().
        """
        self._pipeline.register(middleware)

    def register_handlers(self, session: Session) -> List[Callable[[], None]]:
        """Subscribe to message events of session and seal registration.

        Attaching again is only allowed after unregister_handlers().

        Returns:
            Unsubscribe callables for the added event handlers.

        Raises:
            RegistrationClosedError: If the handlers are already attached.
        """
        if self._unsubscribers:
            raise RegistrationClosedError("event handlers")

        self._registry.seal()
        self._pipeline.seal()

        unsubscribers = [
            session.add_handler(
                EventType.MESSAGE_CREATE, partial(self._on_message, is_edit=False)
            )
        ]
        if self._config.execute_on_edit:
            unsubscribers.append(
                session.add_handler(
                    EventType.MESSAGE_UPDATE, partial(self._on_message, is_edit=True)
                )
            )
        self._unsubscribers.extend(unsubscribers)

        logger.info(
            "handlers_registered",
            commands=len(self._registry),
            middlewares=len(self._pipeline.middlewares),
            execute_on_edit=self._config.execute_on_edit,
        )
        return unsubscribers

    def unregister_handlers(self) -> None:
        """Remove every event subscription added by register_handlers()."""
        while self._unsubscribers:
            self._unsubscribers.pop()()

    async def _on_message(self, session: Session, message: Message, *, is_edit: bool) -> None:
        await self.handle_message(session, message, is_edit=is_edit)

    # --- Introspection ---

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def command_map(self) -> Mapping[str, Command]:
        return self._registry.command_map

    @property
    def command_instances(self) -> Tuple[Command, ...]:
        return self._registry.instances

    @property
    def middlewares(self) -> Sequence[Middleware]:
        return self._pipeline.middlewares

    def get_command(self, invoke: str) -> Optional[Command]:
        return self._registry.lookup(invoke)

    # --- Shared objects ---

    def get_object(self, key: str, default: Any = None) -> Any:
        return self._objects.get(key, default)

    def set_object(self, key: str, value: Any) -> None:
        self._objects.set(key, value)

    def get_typed_object(self, key: str, expected: Type[T], *default: Any) -> T:
        """Return a shared object checked against expected.

        Raises:
            KeyError: If missing and no default was given.
            ObjectTypeError: If the stored value has another type.
        """
        return self._objects.get_typed(key, expected, *default)

    # --- Dispatch ---

    async def _report_error(self, ctx: Context, kind: ErrorKind, error: BaseException) -> None:
        try:
            result = self._on_error(ctx, kind, error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                "error_reporter_failed",
                kind=kind.value,
                error=str(e),
                original_error=str(error),
            )

    def _should_ignore(self, session: Session, message: Message) -> bool:
        author = message.author
        if author is None or author.id == session.user_id:
            return True
        if len(message.content) < MIN_CONTENT_LENGTH:
            return True
        return author.bot and not self._config.allow_bots

    async def handle_message(
        self, session: Session, message: Message, is_edit: bool = False
    ) -> DispatchResult:
        """Dispatch one inbound message.

        Args:
            session: Session the message arrived on.
            message: The message.
            is_edit: Whether this is a message update event.

        Returns:
            Where the dispatch ended.
        """
        if self._should_ignore(session, message):
            return DispatchResult.IGNORED

        config = self._config
        ctx = Context(
            session=session,
            message=message,
            member=message.member,
            is_edit=is_edit,
        )

        try:
            ctx.used_prefix = await resolve_prefix(
                message.content,
                config.general_prefix,
                message.guild_id,
                self._guild_prefix_getter,
            )
        except Exception as e:
            await self._report_error(ctx, ErrorKind.GUILD_PREFIX_LOOKUP, e)
            return DispatchResult.ERROR

        if not ctx.used_prefix:
            return DispatchResult.NO_PREFIX

        channel = _from_state(session.state_channel, message.channel_id)
        if channel is None:
            try:
                channel = await session.fetch_channel(message.channel_id)
            except Exception as e:
                await self._report_error(ctx, ErrorKind.GET_CHANNEL, e)
                return DispatchResult.ERROR
        ctx.channel = channel

        ctx.is_dm = channel.type.is_direct
        if ctx.is_dm and not config.allow_dm:
            logger.debug("dm_dispatch_disabled", channel_id=channel.id)
            return DispatchResult.DM_DISABLED

        if not ctx.is_dm:
            guild = _from_state(session.state_guild, message.guild_id)
            if guild is None:
                try:
                    guild = await session.fetch_guild(message.guild_id)
                except Exception as e:
                    await self._report_error(ctx, ErrorKind.GET_GUILD, e)
                    return DispatchResult.ERROR
            ctx.guild = guild

        invoke, args = split_invocation(
            tokenize(message.content), ctx.used_prefix, config.space_after_prefix
        )
        ctx.invoke = invoke
        ctx.args = ArgumentList(args)

        command = self._registry.lookup(invoke)
        if command is None:
            await self._report_error(ctx, ErrorKind.COMMAND_NOT_FOUND, CommandNotFoundError(invoke))
            return DispatchResult.ERROR

        if ctx.is_dm and not command.executable_in_dm:
            await self._report_error(
                ctx, ErrorKind.NOT_EXECUTABLE_IN_DM, NotExecutableInDMError(invoke)
            )
            return DispatchResult.ERROR

        ctx.objects.set(OBJECT_KEY_HANDLER, self)

        outcome = await self._pipeline.run_layer(command, ctx, MiddlewareLayer.BEFORE_COMMAND)
        if outcome is not LayerResult.CONTINUE:
            return _LAYER_RESULTS[outcome]

        logger.info(
            "command_executing",
            invoke=invoke,
            command=type(command).__name__,
            args=len(ctx.args),
            is_dm=ctx.is_dm,
            is_edit=is_edit,
        )
        try:
            await command.execute(ctx)
        except Exception as e:
            await self._report_error(ctx, ErrorKind.COMMAND_EXEC, e)
            return DispatchResult.ERROR

        outcome = await self._pipeline.run_layer(command, ctx, MiddlewareLayer.AFTER_COMMAND)
        if outcome is not LayerResult.CONTINUE:
            return _LAYER_RESULTS[outcome]

        if config.delete_message_after:
            try:
                await session.delete_message(message.channel_id, message.id)
            except Exception as e:
                await self._report_error(ctx, ErrorKind.DELETE_COMMAND_MESSAGE, e)
                return DispatchResult.ERROR

        return DispatchResult.COMPLETED
