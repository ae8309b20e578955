"""Turn search results into display rows, skipping anything that no longer resolves."""

from collections.abc import Iterable
from dataclasses import dataclass

from fintunes_search.models.catalog import CatalogSnapshot
from fintunes_search.models.result import LeafMatch, SearchResult


@dataclass(frozen=True)
class ResultRow:
    """A single line in the result list."""

    key: str
    album_id: str
    title: str
    subtitle: str
    kind: str


def project_rows(results: Iterable[SearchResult], snapshot: CatalogSnapshot) -> list[ResultRow]:
    """Resolve results against ``snapshot``.

    A result whose album is missing from the snapshot is omitted; this is the
    normal outcome for remote hits on albums the local cache has not seen yet.
    """
    rows: list[ResultRow] = []
    for result in results:
        album = snapshot.get(result.resolve_id)
        if album is None:
            continue

        artist = album.album_artist or ""
        if isinstance(result, LeafMatch):
            rows.append(
                ResultRow(
                    key=result.id,
                    album_id=album.id,
                    title=result.display_name or album.name,
                    subtitle=f"Track • {artist} — {album.name}",
                    kind=result.kind,
                )
            )
        else:
            rows.append(
                ResultRow(
                    key=result.id,
                    album_id=album.id,
                    title=album.name,
                    subtitle=f"Album • {artist}",
                    kind=result.kind,
                )
            )
    return rows
