"""In-memory holder of the current catalog snapshot."""

from collections.abc import Callable, Iterable

from loguru import logger

from fintunes_search.models.catalog import CatalogEntity, CatalogSnapshot

SnapshotListener = Callable[[CatalogSnapshot], None]


class CatalogStore:
    """Publishes catalog snapshots and notifies subscribers on replacement.

    The store never mutates a published snapshot; every change swaps in a
    new one.
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        self._snapshot = snapshot if snapshot is not None else CatalogSnapshot()
        self._listeners: list[SnapshotListener] = []

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def subscribe(self, callback: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def replace(self, snapshot: CatalogSnapshot) -> None:
        """Swap in ``snapshot`` and notify subscribers."""
        if snapshot is self._snapshot:
            return
        self._snapshot = snapshot
        logger.debug(
            "Catalog snapshot v{} published ({} entities)", snapshot.version, len(snapshot)
        )
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Catalog listener {!r} failed", listener)

    def publish(self, entities: Iterable[CatalogEntity]) -> CatalogSnapshot:
        """Replace the whole catalog with ``entities``."""
        snapshot = CatalogSnapshot.from_entities(entities, version=self._snapshot.version + 1)
        self.replace(snapshot)
        return snapshot

    def merge(self, entities: Iterable[CatalogEntity]) -> CatalogSnapshot:
        """Publish the current catalog with ``entities`` added or replaced."""
        entities = list(entities)
        if not entities:
            return self._snapshot
        snapshot = self._snapshot.with_entities(entities)
        self.replace(snapshot)
        return snapshot
