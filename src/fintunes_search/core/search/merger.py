"""Combine local and remote search results into one list."""

from collections.abc import Sequence

from loguru import logger

from fintunes_search.config import CONTAINER_KINDS, LEAF_KINDS
from fintunes_search.models.result import ContainerMatch, LeafMatch, RawResult, SearchResult


def merge_results(
    remote_raw: Sequence[RawResult],
    local_results: Sequence[SearchResult],
) -> list[SearchResult]:
    """Append remote results to the local ones, dropping what is already shown.

    Local results always come first and keep their order. A remote album that
    is already a local match is dropped, and so is a remote track whose album
    is already a local match. Tracks without an album and unknown item types
    cannot be displayed and are dropped as well.

    Args:
        remote_raw: Items returned by the remote search, in server order.
        local_results: Results from the fuzzy index for the same query.

    Returns:
        A new list; neither input is modified.
    """
    local_ids = {r.id for r in local_results if isinstance(r, ContainerMatch)}
    seen = set(local_ids)
    remote: list[SearchResult] = []

    for item in remote_raw:
        if item.kind in CONTAINER_KINDS:
            if item.id in seen:
                continue
            seen.add(item.id)
            remote.append(ContainerMatch(id=item.id))
        elif item.kind in LEAF_KINDS:
            if not item.container_id:
                logger.debug("Dropping remote track {} without an album", item.id)
                continue
            if item.container_id in local_ids:
                continue
            remote.append(
                LeafMatch(
                    id=item.id,
                    container_id=item.container_id,
                    display_name=item.display_name,
                )
            )
        else:
            logger.debug("Dropping remote result {} of unknown kind {!r}", item.id, item.kind)

    return [*local_results, *remote]


def parse_raw_results(payload: object) -> list[RawResult]:
    """Convert a remote search payload into RawResults.

    The payload is ``{"results": [...]}`` where each item is a Jellyfin item
    dict. Items without ``Id`` or ``Type`` are skipped.

    Raises:
        ValueError: If the payload is not of that shape at all.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        msg = f"bad search payload: {payload!r:.120}"
        raise ValueError(msg)

    parsed: list[RawResult] = []
    for item in payload["results"]:
        if not isinstance(item, dict) or not item.get("Id") or not item.get("Type"):
            logger.debug("Skipping malformed remote item {!r:.80}", item)
            continue
        is_leaf = item["Type"] in LEAF_KINDS
        parsed.append(
            RawResult(
                id=item["Id"],
                kind=item["Type"],
                container_id=item.get("AlbumId") if is_leaf else None,
                display_name=item.get("Name") if is_leaf else None,
            )
        )
    return parsed
