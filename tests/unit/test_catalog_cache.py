"""Tests for reading and writing the catalog cache."""

import json
from pathlib import Path

import pytest

from fintunes_search.core.catalog.cache import load_catalog, parse_catalog_item, save_catalog
from fintunes_search.models.catalog import CatalogSnapshot, EntityKind


def test_parse_album_item() -> None:
    entity = parse_catalog_item(
        {
            "Id": "A1",
            "Name": "Moonlight",
            "Type": "MusicAlbum",
            "AlbumArtist": "Luna Park",
            "AlbumArtists": [{"Name": "Luna Park", "Id": "x"}],
            "Artists": ["Luna Park", "Guest"],
            "ProductionYear": 2001,
        }
    )
    assert entity.id == "A1"
    assert entity.kind is EntityKind.CONTAINER
    assert entity.album_artist == "Luna Park"
    assert entity.artists == ("Luna Park", "Guest")
    assert entity.production_year == 2001


def test_parse_track_item() -> None:
    entity = parse_catalog_item({"Id": "T1", "Name": "Intro", "Type": "Audio", "AlbumId": "A1"})
    assert entity.kind is EntityKind.LEAF
    assert entity.album_id == "A1"


@pytest.mark.parametrize("item", [{}, {"Id": "A1"}, {"Name": "No id"}])
def test_parse_rejects_items_without_id_or_name(item: dict[str, str]) -> None:
    with pytest.raises(ValueError, match="without Id/Name"):
        parse_catalog_item(item)


def test_save_then_load_preserves_entities(tmp_path: Path, snapshot: CatalogSnapshot) -> None:
    path = tmp_path / "data" / "catalog.json"
    save_catalog(path, snapshot)

    loaded = load_catalog(path)

    assert loaded.version == snapshot.version
    assert dict(loaded.entities) == dict(snapshot.entities)


def test_load_skips_malformed_items(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps({"version": 3, "items": [{"Id": "A1", "Name": "Moonlight"}, {"Name": "?"}]})
    )
    loaded = load_catalog(path)
    assert list(loaded.entities) == ["A1"]
    assert loaded.version == 3


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path / "nope.json")


def test_load_rejects_non_catalog_file(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([1, 2, 3]))
    with pytest.raises(ValueError, match="bad catalog file"):
        load_catalog(path)


@pytest.mark.parametrize("item", ["A1", None, ["A1", "Moonlight"]])
def test_parse_rejects_non_object_items(item: object) -> None:
    with pytest.raises(ValueError, match="not an object"):
        parse_catalog_item(item)


@pytest.mark.parametrize(
    "extra", [{"AlbumArtists": "Luna Park"}, {"Artists": "Luna Park"}, {"Artists": {"a": 1}}]
)
def test_parse_rejects_non_list_artist_fields(extra: dict[str, object]) -> None:
    with pytest.raises(ValueError, match="non-list artist fields"):
        parse_catalog_item({"Id": "A1", "Name": "Moonlight", **extra})


def test_parse_treats_null_artist_fields_as_empty() -> None:
    entity = parse_catalog_item(
        {"Id": "A1", "Name": "Moonlight", "AlbumArtists": None, "Artists": None}
    )
    assert entity.artists == ()


def test_parse_keeps_only_named_artist_entries() -> None:
    entity = parse_catalog_item(
        {
            "Id": "A1",
            "Name": "Moonlight",
            "AlbumArtists": ["Luna Park", {"Id": "x"}, {"Name": "Luna Park"}],
            "Artists": [None, 7, "Guest"],
        }
    )
    assert entity.artists == ("Luna Park", "Guest")


def test_load_skips_non_object_items(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "version": 1,
                "items": [
                    "garbage",
                    {"Id": "A1", "Name": "Moonlight"},
                    {"Id": "A2", "Name": "Blue Train", "AlbumArtists": "John Coltrane"},
                ],
            }
        )
    )
    loaded = load_catalog(path)
    assert list(loaded.entities) == ["A1"]
