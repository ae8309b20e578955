"""Tests for the fuzzy album index."""

import pytest

from fintunes_search.core.search.fuzzy_index import FuzzyIndex, dissimilarity
from fintunes_search.models.catalog import CatalogEntity, CatalogSnapshot
from fintunes_search.models.result import ContainerMatch


def test_prefix_query_matches_album_name(snapshot: CatalogSnapshot) -> None:
    index = FuzzyIndex(snapshot)
    assert index.search("moon") == [ContainerMatch(id="A1"), ContainerMatch(id="A4")]


def test_search_is_case_insensitive(snapshot: CatalogSnapshot) -> None:
    index = FuzzyIndex(snapshot)
    assert index.search("MOON SAFARI")[0] == ContainerMatch(id="A4")


def test_search_matches_artist_fields(snapshot: CatalogSnapshot) -> None:
    index = FuzzyIndex(snapshot)
    assert index.search("coltrane") == [ContainerMatch(id="A2")]
    assert index.search("miles davis") == [ContainerMatch(id="A3")]


def test_search_excludes_leaf_entities(snapshot: CatalogSnapshot) -> None:
    index = FuzzyIndex(snapshot)
    ids = {m.id for m in index.search("moonlight sonata")}
    assert "T1" not in ids


@pytest.mark.parametrize("query", ["", "   ", "!!"])
def test_empty_query_returns_nothing(snapshot: CatalogSnapshot, query: str) -> None:
    assert FuzzyIndex(snapshot).search(query) == []


def test_unrelated_query_returns_nothing(snapshot: CatalogSnapshot) -> None:
    assert FuzzyIndex(snapshot).search("zzzzqqq") == []


def test_results_are_containers_of_snapshot_in_score_order(snapshot: CatalogSnapshot) -> None:
    index = FuzzyIndex(snapshot, threshold=1.0)
    for query in ["moon", "blue", "davis", "train", "a"]:
        scored = index.search_scored(query)
        scores = [s.score for s in scored]
        assert scores == sorted(scores)
        for s in scored:
            entity = snapshot.get(s.match.id)
            assert entity is not None
            assert entity in list(snapshot.containers())


def test_threshold_filters_weak_matches(snapshot: CatalogSnapshot) -> None:
    strict = FuzzyIndex(snapshot, threshold=0.0)
    lenient = FuzzyIndex(snapshot, threshold=1.0)
    assert len(strict.search("blu tran")) <= len(lenient.search("blu tran"))
    assert len(lenient.search("blu tran")) == 4


def test_dissimilarity_bounds() -> None:
    assert dissimilarity("moon", "moonlight") == 0.0
    assert dissimilarity("abc", "xyz") == 1.0
    assert 0.0 < dissimilarity("moonlite", "moonlight") < 1.0


def test_short_field_does_not_match_long_query() -> None:
    snap = CatalogSnapshot.from_entities([CatalogEntity(id="A1", name="X", album_artist="Air")])
    assert FuzzyIndex(snap).search("air supply greatest hits") == []


def test_broken_entity_yields_empty_index() -> None:
    good = CatalogEntity(id="A1", name="Moonlight")
    bad = CatalogEntity(id="A2", name="Other", artists=42)  # type: ignore[arg-type]
    index = FuzzyIndex(CatalogSnapshot.from_entities([good, bad]))
    assert len(index) == 0
    assert index.search("moon") == []
