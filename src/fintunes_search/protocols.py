"""Protocols for the collaborators of the search session."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from fintunes_search.models.catalog import CatalogSnapshot


@runtime_checkable
class RemoteSearchProtocol(Protocol):
    """Protocol for asynchronous remote search clients."""

    async def search(self, term: str) -> dict[str, Any]:
        """Search the server and return ``{"results": [item, ...]}``.

        Each item is a Jellyfin item dict. ``Id`` and ``Type`` are read for
        every item; ``AlbumId`` and ``Name`` only for tracks (``Audio``).
        Failures are raised, never returned.
        """
        ...


@runtime_checkable
class CatalogProviderProtocol(Protocol):
    """Protocol for the source of catalog snapshots."""

    @property
    def snapshot(self) -> CatalogSnapshot:
        """The snapshot currently published."""
        ...

    def subscribe(self, callback: Callable[[CatalogSnapshot], None]) -> Callable[[], None]:
        """Call ``callback`` with every new snapshot; return an unsubscribe function."""
        ...
