"""Local-first search over a Jellyfin music catalog."""

from fintunes_search.api import AsyncJellyfinSearch, JellyfinApi
from fintunes_search.core.catalog.store import CatalogStore
from fintunes_search.core.search.session import SearchController, SearchView
from fintunes_search.protocols import CatalogProviderProtocol, RemoteSearchProtocol

__all__ = [
    "AsyncJellyfinSearch",
    "CatalogProviderProtocol",
    "CatalogStore",
    "JellyfinApi",
    "RemoteSearchProtocol",
    "SearchController",
    "SearchView",
]
