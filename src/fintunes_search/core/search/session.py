"""Search session controller: local results now, remote results when they arrive."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from fintunes_search.config import DEBOUNCE_WINDOW, FUZZY_THRESHOLD
from fintunes_search.core.search.debounce import DebouncedFetcher
from fintunes_search.core.search.fuzzy_index import FuzzyIndex
from fintunes_search.core.search.merger import merge_results
from fintunes_search.models.catalog import CatalogSnapshot
from fintunes_search.models.result import RawResult, SearchResult
from fintunes_search.protocols import CatalogProviderProtocol, RemoteSearchProtocol


class SessionState(str, Enum):
    """Lifecycle of a search session."""

    IDLE = "idle"
    LOCAL_ONLY = "local_only"
    LOADING = "loading"
    RESOLVED = "resolved"


@dataclass
class SearchSession:
    """Mutable per-query state owned by the controller."""

    query: str = ""
    sequence: int = 0
    local_results: list[SearchResult] = field(default_factory=list)
    remote_raw: list[RawResult] = field(default_factory=list)
    results: list[SearchResult] = field(default_factory=list)
    loading: bool = False
    state: SessionState = SessionState.IDLE

    @property
    def remote_results(self) -> list[SearchResult]:
        """The part of ``results`` contributed by the remote search."""
        return self.results[len(self.local_results) :]


@dataclass(frozen=True)
class SearchView:
    """What the rendering layer gets after every change."""

    query: str
    results: tuple[SearchResult, ...]
    loading: bool
    state: SessionState
    sequence: int

    @property
    def show_empty_state(self) -> bool:
        """True when a query produced nothing and nothing more is coming."""
        return bool(self.query) and not self.results and not self.loading


ViewListener = Callable[[SearchView], None]


class SearchController:
    """Drive one search box.

    Each query change runs the fuzzy index synchronously and publishes its
    results straight away, then hands the query to a debounced remote fetch.
    Remote responses are merged in only if they belong to the latest query;
    anything tagged with an older sequence number is dropped.

    Without a remote client the controller runs local-only.
    """

    def __init__(
        self,
        catalog: CatalogProviderProtocol,
        client: RemoteSearchProtocol | None = None,
        *,
        threshold: float = FUZZY_THRESHOLD,
        window: float = DEBOUNCE_WINDOW,
    ) -> None:
        self._threshold = threshold
        self._index = FuzzyIndex(catalog.snapshot, threshold=threshold)
        self._session = SearchSession()
        self._sequence = 0
        self._listeners: list[ViewListener] = []

        self._fetcher: DebouncedFetcher | None = None
        if client is not None:
            self._fetcher = DebouncedFetcher(
                client,
                on_results=self._on_remote_results,
                on_failure=self._on_remote_failure,
                on_start=self._on_remote_started,
                window=window,
            )

        self._unsubscribe = catalog.subscribe(self._on_snapshot)

    @property
    def session(self) -> SearchSession:
        return self._session

    @property
    def index(self) -> FuzzyIndex:
        return self._index

    @property
    def fetcher(self) -> DebouncedFetcher | None:
        return self._fetcher

    @property
    def view(self) -> SearchView:
        s = self._session
        return SearchView(
            query=s.query,
            results=tuple(s.results),
            loading=s.loading,
            state=s.state,
            sequence=s.sequence,
        )

    def subscribe(self, callback: ViewListener) -> Callable[[], None]:
        """Call ``callback`` with a fresh view after every publish."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def set_query(self, query: str) -> None:
        """Handle a change of the search box text.

        Never blocks: the local search runs inline, the remote search is only
        scheduled.
        """
        if query == self._session.query:
            return

        self._sequence += 1

        if not query.strip():
            if self._fetcher is not None:
                self._fetcher.cancel()
            self._session = SearchSession(sequence=self._sequence)
            self._publish()
            return

        local = self._index.search(query)
        self._session = SearchSession(
            query=query,
            sequence=self._sequence,
            local_results=local,
            results=list(local),
            loading=self._fetcher is not None,
            state=SessionState.LOCAL_ONLY if self._fetcher is not None else SessionState.RESOLVED,
        )
        self._publish()

        if self._fetcher is not None:
            self._fetcher.schedule(query, local, sequence=self._sequence)

    def clear(self) -> None:
        self.set_query("")

    async def wait_until_settled(self) -> None:
        """Wait for the pending and in-flight remote searches to finish."""
        if self._fetcher is not None:
            await self._fetcher.drain()

    async def aclose(self) -> None:
        """Stop listening to the catalog and let in-flight requests finish."""
        self._unsubscribe()
        if self._fetcher is not None:
            await self._fetcher.aclose()

    def _is_current(self, sequence: int) -> bool:
        return sequence == self._session.sequence and self._session.state is not SessionState.IDLE

    def _on_remote_started(self, sequence: int) -> None:
        if self._is_current(sequence):
            self._session.state = SessionState.LOADING
            self._publish()

    def _on_remote_results(
        self,
        sequence: int,
        raw: list[RawResult],
        local_results: tuple[SearchResult, ...],
    ) -> None:
        if not self._is_current(sequence):
            logger.debug(
                "Dropping stale remote results #{} (current #{})", sequence, self._session.sequence
            )
            return
        s = self._session
        # The catalog may have changed since the fetch was scheduled; merge
        # against the local results that are on screen now.
        s.remote_raw = list(raw)
        s.results = merge_results(raw, s.local_results)
        s.loading = False
        s.state = SessionState.RESOLVED
        logger.debug(
            "Remote search #{} resolved: {} local, {} remote",
            sequence,
            len(s.local_results),
            len(s.remote_results),
        )
        self._publish()

    def _on_remote_failure(self, sequence: int, exc: Exception) -> None:
        if not self._is_current(sequence):
            return
        self._session.loading = False
        self._session.state = SessionState.RESOLVED
        self._publish()

    def _on_snapshot(self, snapshot: CatalogSnapshot) -> None:
        if snapshot is self._index.snapshot:
            return
        self._index = FuzzyIndex(snapshot, threshold=self._threshold)

        s = self._session
        if s.state is SessionState.IDLE:
            return
        s.local_results = self._index.search(s.query)
        s.results = merge_results(s.remote_raw, s.local_results)
        self._publish()

    def _publish(self) -> None:
        view = self.view
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Search view listener {!r} failed", listener)
