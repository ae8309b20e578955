"""Search result models shared by the index, merger and session."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ContainerMatch:
    """A match on a whole album, rendered from the catalog entry."""

    id: str
    kind: Literal["container"] = "container"

    @property
    def resolve_id(self) -> str:
        return self.id


@dataclass(frozen=True)
class LeafMatch:
    """A match on a track, rendered through its album."""

    id: str
    container_id: str
    display_name: str | None = None
    kind: Literal["leaf"] = "leaf"

    @property
    def resolve_id(self) -> str:
        return self.container_id


SearchResult = ContainerMatch | LeafMatch


@dataclass(frozen=True)
class ScoredMatch:
    """A local match with its dissimilarity score (0 is exact)."""

    match: ContainerMatch
    score: float


@dataclass(frozen=True)
class RawResult:
    """A single item returned by the remote search service."""

    id: str
    kind: str
    container_id: str | None = None
    display_name: str | None = None
