"""Command and middleware abstractions plus the built-in help command."""

from .base import Command, CommandFunc, FunctionCommand, Middleware, MiddlewareLayer
from .help import HelpCommand

__all__ = [
    "Command",
    "CommandFunc",
    "FunctionCommand",
    "HelpCommand",
    "Middleware",
    "MiddlewareLayer",
]
