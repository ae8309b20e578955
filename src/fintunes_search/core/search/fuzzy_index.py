"""Approximate-match index over the container entities of a catalog snapshot."""

from collections.abc import Sequence

from loguru import logger
from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from fintunes_search.config import FUZZY_THRESHOLD, SEARCH_KEYS
from fintunes_search.models.catalog import CatalogEntity, CatalogSnapshot
from fintunes_search.models.result import ContainerMatch, ScoredMatch


def _field_values(entity: CatalogEntity, keys: Sequence[str]) -> list[str]:
    values: list[str] = []
    for key in keys:
        raw = getattr(entity, key)
        if raw is None:
            continue
        if isinstance(raw, str):
            values.append(raw)
        else:
            values.extend(raw)
    return [v for v in (default_process(v) for v in values) if v]


def dissimilarity(query: str, value: str) -> float:
    """Score how far ``value`` is from ``query``: 0.0 is a match, 1.0 is unrelated.

    Both arguments must already be normalised. A query shorter than the value
    is matched against its best-aligned substring, so typing the start of a
    title scores as well as the full title.
    """
    if len(query) <= len(value):
        similarity = fuzz.partial_ratio(query, value)
    else:
        similarity = fuzz.ratio(query, value)
    return 1.0 - similarity / 100.0


class FuzzyIndex:
    """Searchable view of one catalog snapshot.

    The index is built once per snapshot and reused for every query against
    it. Build it again when the snapshot changes; it is never patched.
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        *,
        threshold: float = FUZZY_THRESHOLD,
        keys: Sequence[str] = SEARCH_KEYS,
    ) -> None:
        self.snapshot = snapshot
        self.threshold = threshold
        self.keys = tuple(keys)
        self._entries: list[tuple[str, list[str]]] = []

        try:
            self._entries = [(e.id, _field_values(e, self.keys)) for e in snapshot.containers()]
        except Exception:
            logger.exception(
                "Failed to build search index for catalog v{}, local search disabled",
                snapshot.version,
            )
            self._entries = []
        else:
            logger.debug(
                "Built search index for catalog v{} ({} entries)",
                snapshot.version,
                len(self._entries),
            )

    def __len__(self) -> int:
        return len(self._entries)

    def search_scored(self, query: str) -> list[ScoredMatch]:
        """Return matches with their scores, best first.

        Entries with equal scores keep their catalog order.
        """
        needle = default_process(query)
        if not needle:
            return []

        scored: list[ScoredMatch] = []
        for entity_id, values in self._entries:
            if not values:
                continue
            score = min(dissimilarity(needle, v) for v in values)
            if score <= self.threshold:
                scored.append(ScoredMatch(match=ContainerMatch(id=entity_id), score=score))

        scored.sort(key=lambda s: s.score)
        return scored

    def search(self, query: str) -> list[ContainerMatch]:
        """Return container matches for ``query``, best first. Empty query gives []."""
        return [s.match for s in self.search_scored(query)]
