"""Shared test fixtures."""

import pytest

from fintunes_search.core.catalog.store import CatalogStore
from fintunes_search.models.catalog import CatalogEntity, CatalogSnapshot, EntityKind

ALBUMS = [
    CatalogEntity(id="A1", name="Moonlight", album_artist="Luna Park", artists=("Luna Park",)),
    CatalogEntity(
        id="A2", name="Blue Train", album_artist="John Coltrane", artists=("John Coltrane",)
    ),
    CatalogEntity(id="A3", name="Kind of Blue", album_artist="Miles Davis"),
    CatalogEntity(id="A4", name="Moon Safari", album_artist="Air", production_year=1998),
    CatalogEntity(
        id="T1",
        name="Moonlight Sonata",
        kind=EntityKind.LEAF,
        album_id="A1",
        album_artist="Luna Park",
    ),
]


@pytest.fixture
def snapshot() -> CatalogSnapshot:
    """Return a small catalog with four albums and one track."""
    return CatalogSnapshot.from_entities(ALBUMS, version=1)


@pytest.fixture
def store(snapshot: CatalogSnapshot) -> CatalogStore:
    return CatalogStore(snapshot)


@pytest.fixture
def moonlight_store() -> CatalogStore:
    """A catalog holding only the album 'Moonlight' (id A1)."""
    return CatalogStore(
        CatalogSnapshot.from_entities([CatalogEntity(id="A1", name="Moonlight")], version=1)
    )
