"""Ordered, layered middleware execution."""

import enum
from typing import Awaitable, Callable, List, Tuple

import structlog

from .commands.base import Command, Middleware, MiddlewareLayer
from .context import Context
from .exceptions import ErrorKind, RegistrationClosedError

logger = structlog.get_logger("commandwire.middleware")

# async (ctx, kind, exc) -> None; the dispatcher's error reporting hook
ReportError = Callable[[Context, ErrorKind, BaseException], Awaitable[None]]


class LayerResult(str, enum.Enum):
    """Outcome of running one middleware layer."""
    CONTINUE = "continue"  # Every subscribed middleware let the dispatch go on
    STOPPED = "stopped"    # A middleware returned False
    FAILED = "failed"      # A middleware raised; the error was reported


class MiddlewarePipeline:
    """Runs registered middleware in registration order, per layer.

    Args:
        report_error: Called once when a middleware raises.
    """

    def __init__(self, report_error: ReportError):
        self._report_error = report_error
        self._middlewares: List[Middleware] = []
        self._sealed = False

    def register(self, middleware: Middleware) -> None:
        """Append a middleware.

        Raises:
            RegistrationClosedError: If the pipeline was sealed.
        """
        if self._sealed:
            raise RegistrationClosedError("middleware")
        self._middlewares.append(middleware)
        logger.debug(
            "middleware_registered",
            middleware=type(middleware).__name__,
            layer=int(middleware.layer),
        )

    def seal(self) -> None:
        self._sealed = True

    @property
    def middlewares(self) -> Tuple[Middleware, ...]:
        return tuple(self._middlewares)

    async def run_layer(
        self, command: Command, ctx: Context, layer: MiddlewareLayer
    ) -> LayerResult:
        """Run every middleware subscribed to layer, stopping at the first
        one that does not let the dispatch continue."""
        for mw in self._middlewares:
            if not mw.layer & layer:
                continue

            try:
                proceed = await mw.handle(command, ctx, layer)
            except Exception as e:
                await self._report_error(ctx, ErrorKind.MIDDLEWARE, e)
                return LayerResult.FAILED

            if not proceed:
                logger.debug(
                    "middleware_stopped_dispatch",
                    middleware=type(mw).__name__,
                    layer=layer.name,
                    invoke=ctx.invoke,
                )
                return LayerResult.STOPPED

        return LayerResult.CONTINUE
