"""Collapse bursts of query changes into a single remote search."""

import asyncio
from collections.abc import Callable, Sequence

from loguru import logger

from fintunes_search.config import DEBOUNCE_WINDOW
from fintunes_search.core.search.merger import parse_raw_results
from fintunes_search.models.result import RawResult, SearchResult
from fintunes_search.protocols import RemoteSearchProtocol

ResultsCallback = Callable[[int, list[RawResult], tuple[SearchResult, ...]], None]
FailureCallback = Callable[[int, Exception], None]
StartCallback = Callable[[int], None]


class DebouncedFetcher:
    """Run a remote search once the query has been quiet for ``window`` seconds.

    Every call to :meth:`schedule` carries the sequence number of the query it
    was made for. Scheduling again before the timer fires cancels the pending
    timer, so only the latest query in a burst reaches the server. A request
    that is already in flight is left to finish; its sequence number is passed
    to the callbacks so the owner can tell whether it is still wanted.

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        client: RemoteSearchProtocol,
        *,
        on_results: ResultsCallback,
        on_failure: FailureCallback,
        on_start: StartCallback | None = None,
        window: float = DEBOUNCE_WINDOW,
    ) -> None:
        self._client = client
        self._on_results = on_results
        self._on_failure = on_failure
        self._on_start = on_start
        self.window = window

        self._timer: asyncio.TimerHandle | None = None
        self._token: int | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a scheduled search is waiting for its timer."""
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        """Number of remote requests currently awaiting a response."""
        return len(self._tasks)

    def schedule(
        self, query: str, local_results: Sequence[SearchResult], *, sequence: int
    ) -> None:
        """Arm the timer for ``query``, superseding any pending one."""
        if self._timer is not None:
            logger.debug("Remote search for #{} superseded by #{}", self._token, sequence)
        self.cancel()
        loop = asyncio.get_running_loop()
        self._token = sequence
        self._timer = loop.call_later(
            self.window, self._fire, query, tuple(local_results), sequence
        )

    def cancel(self) -> None:
        """Drop the pending timer, if any. In-flight requests are not affected."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._token = None

    def _fire(self, query: str, local_results: tuple[SearchResult, ...], sequence: int) -> None:
        if sequence != self._token:
            return
        self._timer = None
        self._token = None
        if self._on_start is not None:
            self._on_start(sequence)
        task = asyncio.ensure_future(self._fetch(query, local_results, sequence))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(
        self, query: str, local_results: tuple[SearchResult, ...], sequence: int
    ) -> None:
        logger.debug("Remote search #{} for {!r}", sequence, query)
        try:
            payload = await self._client.search(query)
            raw = parse_raw_results(payload)
        except Exception as exc:
            logger.opt(exception=exc).warning(
                "Remote search for {!r} failed, keeping local results", query
            )
            self._on_failure(sequence, exc)
            return
        self._on_results(sequence, raw, local_results)

    async def drain(self) -> None:
        """Wait until no timer is pending and no request is in flight."""
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self.window)

    async def aclose(self) -> None:
        """Cancel the pending timer and wait for in-flight requests to settle."""
        self.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
