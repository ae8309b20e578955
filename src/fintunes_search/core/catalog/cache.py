"""Read and write the on-disk catalog cache."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from fintunes_search.config import LEAF_KINDS
from fintunes_search.models.catalog import CatalogEntity, CatalogSnapshot, EntityKind


def parse_catalog_item(item: Any) -> CatalogEntity:
    """Convert a Jellyfin item dict into a CatalogEntity.

    Args:
        item: Raw item as returned by the Jellyfin items endpoint.

    Returns:
        The parsed entity. Tracks become leaves, everything else a container.

    Raises:
        ValueError: If the item is not an object, has no ``Id`` or ``Name``,
            or its artist fields are not lists.
    """
    if not isinstance(item, dict):
        msg = f"Catalog item is not an object: {item!r:.120}"
        raise ValueError(msg)
    if not item.get("Id") or item.get("Name") is None:
        msg = f"Catalog item without Id/Name: {item!r:.120}"
        raise ValueError(msg)

    album_artists = item.get("AlbumArtists") or []
    other_artists = item.get("Artists") or []
    if not isinstance(album_artists, list) or not isinstance(other_artists, list):
        msg = f"Catalog item {item['Id']!r} has non-list artist fields"
        raise ValueError(msg)

    artists: list[str] = [
        a["Name"] for a in album_artists if isinstance(a, dict) and isinstance(a.get("Name"), str)
    ]
    artists.extend(a for a in other_artists if isinstance(a, str) and a and a not in artists)

    return CatalogEntity(
        id=item["Id"],
        name=item["Name"],
        kind=EntityKind.LEAF if item.get("Type") in LEAF_KINDS else EntityKind.CONTAINER,
        album_artist=item.get("AlbumArtist"),
        artists=tuple(artists),
        album_id=item.get("AlbumId"),
        production_year=item.get("ProductionYear"),
    )


def _entity_to_item(entity: CatalogEntity) -> dict[str, Any]:
    item: dict[str, Any] = {
        "Id": entity.id,
        "Name": entity.name,
        "Type": "Audio" if entity.kind is EntityKind.LEAF else "MusicAlbum",
        "Artists": list(entity.artists),
    }
    if entity.album_artist is not None:
        item["AlbumArtist"] = entity.album_artist
    if entity.album_id is not None:
        item["AlbumId"] = entity.album_id
    if entity.production_year is not None:
        item["ProductionYear"] = entity.production_year
    return item


def load_catalog(path: Path) -> CatalogSnapshot:
    """Load a cached catalog file into a snapshot.

    Malformed items are skipped with a warning; a file that is not a catalog
    at all raises ValueError.
    """
    if not path.exists():
        msg = f"Catalog cache not found: {path}"
        raise FileNotFoundError(msg)

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        msg = f"bad catalog file {str(path)!r}: expected an object with an 'items' list"
        raise ValueError(msg)

    entities: list[CatalogEntity] = []
    for item in data["items"]:
        try:
            entities.append(parse_catalog_item(item))
        except ValueError:
            logger.warning("Skipping malformed catalog item in {}", path.name)

    logger.debug("Loaded {} catalog entities from {}", len(entities), path)
    return CatalogSnapshot.from_entities(entities, version=int(data.get("version", 0)))


def save_catalog(path: Path, snapshot: CatalogSnapshot) -> None:
    """Write ``snapshot`` to ``path`` as JSON."""
    payload = {
        "version": snapshot.version,
        "items": [_entity_to_item(e) for e in snapshot.entities.values()],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, sort_keys=True, indent=4) + "\n", encoding="utf-8")
    logger.debug("Wrote {} catalog entities to {}", len(snapshot), path)
