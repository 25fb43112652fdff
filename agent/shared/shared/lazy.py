"""Single-initialization cell for the shared capability provider."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Generic, TypeVar

import structlog

from shared.errors import InitializationError

logger = structlog.get_logger()

T = TypeVar("T")

UNINITIALIZED = "uninitialized"
INITIALIZING = "initializing"
READY = "ready"
FAILED = "failed"


class LazyProvider(Generic[T]):
    """Build a provider on first use and hand out the same instance forever.

    The first ``get()`` memoizes a future wrapping the factory; every caller,
    concurrent or later, awaits that same future. A failed factory leaves the
    cell in the ``failed`` state and every later ``get()`` re-raises the same
    ``InitializationError`` until the process restarts.
    """

    def __init__(self, factory: Callable[[], T | Awaitable[T]]):
        self._factory = factory
        self._future: asyncio.Future[T] | None = None

    @property
    def state(self) -> str:
        if self._future is None:
            return UNINITIALIZED
        if not self._future.done():
            return INITIALIZING
        if self._future.cancelled() or self._future.exception() is not None:
            return FAILED
        return READY

    async def get(self) -> T:
        # No await between the check and the assignment.
        if self._future is None:
            self._future = asyncio.ensure_future(self._build())
        return await asyncio.shield(self._future)

    async def _build(self) -> T:
        try:
            value: Any = self._factory()
            if inspect.isawaitable(value):
                value = await value
        except InitializationError as e:
            logger.error("provider_initialization_failed", error=str(e))
            raise
        except Exception as e:
            logger.error("provider_initialization_failed", error=str(e), exc_info=True)
            raise InitializationError(str(e) or e.__class__.__name__) from e
        logger.info("provider_initialized", provider=type(value).__name__)
        return value

    async def aclose(self) -> None:
        """Close the provider if it was ever built successfully."""
        if self.state != READY:
            return
        provider = self._future.result()
        close = getattr(provider, "close", None)
        if close is not None:
            result = close()
            if inspect.isawaitable(result):
                await result
