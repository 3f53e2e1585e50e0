"""commandwire: prefix command dispatch for chat platforms.

Parses chat messages into command invocations and runs them through an
ordered before/after middleware pipeline, reporting every failure
through a single classified error hook.
"""

from .arguments import Argument, ArgumentList
from .commands import Command, FunctionCommand, HelpCommand, Middleware, MiddlewareLayer
from .config import HandlerConfig, Settings
from .context import OBJECT_KEY_HANDLER, Context, ObjectStore
from .dispatcher import DispatchResult, Dispatcher, log_dispatch_error
from .exceptions import (
    ArgumentParseError,
    CommandNotFoundError,
    CommandwireError,
    ConfigurationError,
    DispatchError,
    DuplicateInvokeError,
    ErrorKind,
    NotExecutableInDMError,
    ObjectTypeError,
    RegistrationClosedError,
)
from .middleware import LayerResult, MiddlewarePipeline
from .parsing import resolve_prefix, split_invocation, tokenize
from .platform import Channel, ChannelType, EventType, Guild, Member, Message, Session, User
from .registry import CommandRegistry

__version__ = "1.0.0"

__all__ = [
    "Argument",
    "ArgumentList",
    "ArgumentParseError",
    "Channel",
    "ChannelType",
    "Command",
    "CommandNotFoundError",
    "CommandRegistry",
    "CommandwireError",
    "ConfigurationError",
    "Context",
    "DispatchError",
    "DispatchResult",
    "Dispatcher",
    "DuplicateInvokeError",
    "ErrorKind",
    "EventType",
    "FunctionCommand",
    "Guild",
    "HandlerConfig",
    "HelpCommand",
    "LayerResult",
    "Member",
    "Message",
    "Middleware",
    "MiddlewareLayer",
    "MiddlewarePipeline",
    "NotExecutableInDMError",
    "OBJECT_KEY_HANDLER",
    "ObjectStore",
    "ObjectTypeError",
    "RegistrationClosedError",
    "Session",
    "Settings",
    "User",
    "log_dispatch_error",
    "resolve_prefix",
    "split_invocation",
    "tokenize",
]
