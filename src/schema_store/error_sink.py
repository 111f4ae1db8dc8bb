"""Side channel for errors raised by store operations."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Set, Union

from loguru import logger

ErrorCallback = Callable[[BaseException], Union[None, Awaitable[Any]]]


class ErrorSink:
    """Notify an error callback, or log when none is configured.

    Notification never recovers from the error: the failing operation
    re-raises after the sink returns.
    """

    def __init__(self, callback: Optional[ErrorCallback] = None):
        self.callback = callback
        self._pending: Set[asyncio.Future] = set()

    def on_uncaught(self, error: BaseException) -> None:
        if self.callback is None:
            logger.opt(exception=error).error(
                f"Uncaught store error, no error callback configured: {error}"
            )
            return

        try:
            result = self.callback(error)
        except Exception as callback_error:
            logger.opt(exception=callback_error).error(
                f"Error callback failed while handling: {error}"
            )
            return

        if inspect.isawaitable(result):
            # fire and forget, keep a reference until the callback finishes
            future = asyncio.ensure_future(result)
            self._pending.add(future)
            future.add_done_callback(self._on_done)

    def _on_done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.opt(exception=future.exception()).error("Async error callback failed")

    async def drain(self) -> None:
        """Wait for any async callbacks still running."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
