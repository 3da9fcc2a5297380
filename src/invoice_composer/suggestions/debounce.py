"""Debounced query utility with stale-response suppression.

Every submitted query takes a sequence token. A query only reaches the
fetch function if no newer query arrived during its debounce window, and
its result is only applied if it is still the latest query when the fetch
returns. Older in-flight fetches are never cancelled, only ignored.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchFunction = Callable[[str], Awaitable[T]]
ResultCallback = Callable[[str, T], None]
ClearCallback = Callable[[str], None]
ErrorCallback = Callable[[str, Exception], None]


class DebouncedSearch(Generic[T]):
    """Collapse rapid queries into at most one applied result.

    Example:
        ```python
        search = DebouncedSearch(
            source.search,
            on_result=lambda query, candidates: show(candidates),
            on_clear=lambda query: hide(),
            delay=0.3,
        )

        # Called from the UI on every keystroke
        search.submit("we")
        search.submit("web")

        await search.wait()  # only the results for "web" are shown
        ```
    """

    def __init__(
        self,
        fetch: FetchFunction[T],
        on_result: ResultCallback[T],
        *,
        delay: float = 0.3,
        min_length: int = 2,
        on_clear: ClearCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """Initialize the debouncer.

        Args:
            fetch: Coroutine function performing the query.
            on_result: Called with (query, result) for the latest query only.
            delay: Debounce window in seconds.
            min_length: Queries shorter than this clear instead of fetching.
            on_clear: Called when a too-short query is submitted.
            on_error: Called when the latest query's fetch raises.
        """
        if delay < 0:
            raise ValueError("delay cannot be negative")
        self.fetch = fetch
        self.on_result = on_result
        self.on_clear = on_clear
        self.on_error = on_error
        self.delay = delay
        self.min_length = min_length

        self.latest_query: str | None = None
        self.latest_result: T | None = None

        self._sequence = 0
        self._tasks: dict[int, asyncio.Task[T | None]] = {}
        self._waiting: set[int] = set()

    @property
    def sequence(self) -> int:
        """Token of the most recently submitted query."""
        return self._sequence

    def submit(self, query: str) -> asyncio.Task[T | None] | None:
        """Submit a query; must be called from a running event loop.

        Returns:
            The task that will fetch the query, or None if the query was
            too short and the results were cleared instead.
        """
        self._sequence += 1
        token = self._sequence
        self._cancel_waiting()

        if len(query.strip()) < self.min_length:
            self.latest_query = query
            self.latest_result = None
            if self.on_clear is not None:
                self.on_clear(query)
            return None

        task = asyncio.get_running_loop().create_task(self._run(token, query))
        self._tasks[token] = task
        self._waiting.add(token)
        task.add_done_callback(lambda _t: self._forget(token))
        return task

    async def wait(self) -> None:
        """Wait for every outstanding query to settle."""
        while True:
            pending = [t for t in self._tasks.values() if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def cancel(self) -> None:
        """Cancel all outstanding queries and invalidate their results."""
        self._sequence += 1
        for task in self._tasks.values():
            task.cancel()
        self._waiting.clear()

    def is_current(self, token: int) -> bool:
        return token == self._sequence

    async def _run(self, token: int, query: str) -> T | None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        self._waiting.discard(token)
        if not self.is_current(token):
            return None

        logger.debug("Running query %r (token=%d)", query, token)
        try:
            result = await self.fetch(query)
        except Exception as e:
            if self.is_current(token):
                logger.warning("Query %r failed: %s", query, e)
                if self.on_error is not None:
                    self.on_error(query, e)
            return None

        if not self.is_current(token):
            logger.debug("Discarding stale result for %r (token=%d)", query, token)
            return None

        self.latest_query = query
        self.latest_result = result
        self.on_result(query, result)
        return result

    def _cancel_waiting(self) -> None:
        # Only tasks still inside the debounce window; in-flight fetches finish
        for token in list(self._waiting):
            task = self._tasks.get(token)
            if task is not None:
                task.cancel()
        self._waiting.clear()

    def _forget(self, token: int) -> None:
        self._tasks.pop(token, None)
        self._waiting.discard(token)
