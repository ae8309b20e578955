"""Jellyfin API client and the async search adapter used by search sessions."""

import asyncio
from typing import Any

import requests
from loguru import logger

from fintunes_search.config import (
    LEAF_KINDS,
    REMOTE_ITEM_TYPES,
    REQUEST_TIMEOUT,
    SEARCH_LIMIT,
    JellyfinCredentials,
)
from fintunes_search.core.catalog.cache import parse_catalog_item
from fintunes_search.core.catalog.store import CatalogStore
from fintunes_search.models.catalog import CatalogEntity

_ITEM_FIELDS = "AlbumArtist,AlbumArtists,Artists,ProductionYear"


class JellyfinApi:
    """Blocking Jellyfin client scoped to one user's library."""

    def __init__(
        self, credentials: JellyfinCredentials, *, timeout: float = REQUEST_TIMEOUT
    ) -> None:
        self.credentials = credentials
        self.timeout = timeout
        self.sess = requests.Session()
        self.sess.headers.update(
            {
                "X-Emby-Token": credentials.access_token,
                "Authorization": f'MediaBrowser Token="{credentials.access_token}"',
                "Accept": "application/json",
            }
        )
        logger.debug(
            "API ready: server {!r}, user {!r}", credentials.server_url, credentials.user_id
        )

    def call(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a Jellyfin endpoint and return the decoded JSON object."""
        url = f"{self.credentials.server_url}/{path.lstrip('/')}"
        logger.debug("Making request: {!r} {:.64}", path, repr(params))

        r = self.sess.get(url, params=params, timeout=self.timeout)
        r.raise_for_status()
        rv = r.json()
        if not isinstance(rv, dict):
            msg = f"API call failed: ({path!r}, {params!r}) -> non-object {type(rv).__name__}"
            raise RuntimeError(msg)
        return rv

    def _items(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        rv = self.call(f"Users/{self.credentials.user_id}/Items", params)
        items = rv.get("Items")
        if not isinstance(items, list):
            msg = f"bad items keys: {rv.keys()!r}"
            raise ValueError(msg)
        return items

    def search_items(self, term: str, *, limit: int = SEARCH_LIMIT) -> dict[str, Any]:
        """Search albums and tracks; return ``{"results": [item, ...]}``."""
        items = self._items(
            {
                "SearchTerm": term,
                "IncludeItemTypes": ",".join(REMOTE_ITEM_TYPES),
                "Recursive": "true",
                "Limit": limit,
                "Fields": _ITEM_FIELDS,
            }
        )
        return {"results": items}

    def fetch_albums(self) -> list[dict[str, Any]]:
        """Return every album in the library, sorted by name."""
        return self._items(
            {
                "IncludeItemTypes": "MusicAlbum",
                "Recursive": "true",
                "SortBy": "SortName",
                "Fields": _ITEM_FIELDS,
            }
        )

    def fetch_items(self, ids: list[str]) -> list[dict[str, Any]]:
        """Return the items with the given ids."""
        if not ids:
            return []
        return self._items({"Ids": ",".join(ids), "Fields": _ITEM_FIELDS})


class AsyncJellyfinSearch:
    """Asynchronous remote search on top of :class:`JellyfinApi`.

    Requests run in a worker thread so the event loop stays responsive. When
    a catalog store is given, albums that the search turns up but the local
    catalog lacks are added to it before the results are returned, so rows
    for those albums can be displayed.
    """

    def __init__(self, api: JellyfinApi, *, store: CatalogStore | None = None) -> None:
        self.api = api
        self.store = store

    async def search(self, term: str) -> dict[str, Any]:
        payload = await asyncio.to_thread(self.api.search_items, term)
        if self.store is not None:
            try:
                await self._fetch_missing_albums(self.store, payload["results"])
            except Exception:
                logger.opt(exception=True).warning(
                    "Could not add albums from search {!r} to the catalog", term
                )
        return payload

    async def _fetch_missing_albums(
        self, store: CatalogStore, items: list[dict[str, Any]]
    ) -> None:
        snapshot = store.snapshot
        found: list[CatalogEntity] = []
        missing: list[str] = []

        for item in items:
            if not isinstance(item, dict):
                logger.debug("Ignoring non-object search item {!r:.80}", item)
                continue
            if item.get("Type") in LEAF_KINDS:
                album_id = item.get("AlbumId")
                if album_id and album_id not in snapshot and album_id not in missing:
                    missing.append(album_id)
            elif item.get("Id") and item["Id"] not in snapshot:
                try:
                    found.append(parse_catalog_item(item))
                except ValueError:
                    logger.debug("Ignoring unparseable search item {!r:.80}", item)

        missing = [m for m in missing if m not in {e.id for e in found}]
        if missing:
            try:
                fetched = await asyncio.to_thread(self.api.fetch_items, missing)
            except Exception:
                logger.opt(exception=True).warning(
                    "Could not fetch {} albums referenced by search results", len(missing)
                )
                fetched = []
            for item in fetched:
                try:
                    found.append(parse_catalog_item(item))
                except ValueError:
                    logger.debug("Ignoring unparseable album item {!r:.80}", item)

        if found:
            logger.debug("Adding {} albums from remote search to the catalog", len(found))
            store.merge(found)
