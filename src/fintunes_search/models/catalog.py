"""Catalog domain models."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class EntityKind(str, Enum):
    """Whether an entity groups other items or is an item itself."""

    CONTAINER = "container"
    LEAF = "leaf"


@dataclass(frozen=True)
class CatalogEntity:
    """A single album or track in the cached catalog."""

    id: str
    name: str
    kind: EntityKind = EntityKind.CONTAINER
    album_artist: str | None = None
    artists: tuple[str, ...] = ()
    album_id: str | None = None
    production_year: int | None = None


@dataclass(frozen=True, eq=False)
class CatalogSnapshot:
    """A read-only, versioned view of the catalog.

    Snapshots are never mutated. Changes produce a new snapshot with a higher
    version, so identity comparison is enough to detect a change.
    """

    version: int = 0
    entities: Mapping[str, CatalogEntity] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_entities(
        cls, entities: Iterable[CatalogEntity], *, version: int = 0
    ) -> "CatalogSnapshot":
        return cls(
            version=version,
            entities=MappingProxyType({e.id: e for e in entities}),
        )

    def get(self, entity_id: str) -> CatalogEntity | None:
        return self.entities.get(entity_id)

    def containers(self) -> Iterator[CatalogEntity]:
        """Yield container entities in catalog order."""
        return (e for e in self.entities.values() if e.kind is EntityKind.CONTAINER)

    def with_entities(self, entities: Iterable[CatalogEntity]) -> "CatalogSnapshot":
        """Return a new snapshot with ``entities`` added or replaced."""
        merged = dict(self.entities)
        merged.update((e.id, e) for e in entities)
        return CatalogSnapshot(version=self.version + 1, entities=MappingProxyType(merged))

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.entities

    def __len__(self) -> int:
        return len(self.entities)
