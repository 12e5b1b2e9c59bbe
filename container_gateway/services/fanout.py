"""
FanOut - runs independent Result-returning calls concurrently.

The combined Result fails as soon as any call fails. Calls still in flight at
that point keep running to completion in the background; their results are
discarded. Calls still waiting for a concurrency slot are never started.
"""

import asyncio
from typing import Any, Awaitable, Iterable, TypeVar

from loguru import logger

from container_gateway.services.errors import ServiceError
from container_gateway.services.result import Result

T = TypeVar("T")

SKIPPED = ServiceError("Skipped after an earlier call failed")


class FanOut:
    """
    Concurrent gather over Results with optional bounded concurrency.

    Usage:
        fanout = FanOut()

        result = await fanout.gather(
            [source.list_all(), other.list_all()]
        )
        if result.ok:
            first, second = result.data

        await fanout.drain()  # on shutdown
    """

    def __init__(self, debug: bool = False):
        self._detached: set[asyncio.Task[Any]] = set()
        self._debug = debug

    async def gather(
        self,
        calls: Iterable[Awaitable[Result[T]]],
        limit: int | None = None,
    ) -> Result[list[T]]:
        """
        Await every call, preserving input order in the combined data.

        Args:
            calls: Awaitables each producing a Result
            limit: Maximum number of calls running at once (None for no bound)

        Returns:
            Result with every call's data, or the first failure observed
        """
        semaphore = asyncio.Semaphore(limit) if limit else None
        failed = asyncio.Event()

        async def attempt(call: Awaitable[Result[T]]) -> Result[T]:
            # Calls still queued when an earlier one failed are never started
            if failed.is_set():
                return Result.failure(SKIPPED)
            result = await call
            if not result.ok:
                failed.set()
            return result

        async def run(call: Awaitable[Result[T]]) -> Result[T]:
            try:
                if semaphore is None:
                    return await attempt(call)
                async with semaphore:
                    return await attempt(call)
            finally:
                if asyncio.iscoroutine(call):
                    call.close()

        tasks = [asyncio.ensure_future(run(call)) for call in calls]
        if not tasks:
            return Result.success([])

        pending: set[asyncio.Task[Result[T]]] = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                error = _first_failure(done)
                if error is not None:
                    self._detach(pending)
                    return Result.failure(error)
        except asyncio.CancelledError:
            for task in pending:
                task.cancel()
            raise

        return Result.success([task.result().data for task in tasks])

    def _detach(self, tasks: set[asyncio.Task[Any]]) -> None:
        """Keep references to abandoned calls until they finish."""
        for task in tasks:
            self._detached.add(task)
            task.add_done_callback(self._forget)
        if tasks:
            self._log(f"DETACH: {len(tasks)} calls left to finish in background")

    def _forget(self, task: asyncio.Task[Any]) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[FanOut] Detached call raised {error!r}")

    def get_detached_count(self) -> int:
        """Number of abandoned calls still running."""
        return len(self._detached)

    async def drain(self) -> None:
        """Wait for every detached call to finish."""
        if self._detached:
            self._log(f"DRAIN: waiting for {len(self._detached)} calls")
            await asyncio.gather(*self._detached, return_exceptions=True)

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[FanOut] {message}")


def _first_failure(done: set[asyncio.Task[Result[Any]]]) -> ServiceError | None:
    """Error among finished calls, preferring a real failure over a skip."""
    errors = [task.result().error for task in done if not task.result().ok]
    for error in errors:
        if error is not SKIPPED:
            return error
    return errors[0] if errors else None
