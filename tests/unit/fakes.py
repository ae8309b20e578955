"""Fake implementations for testing search sessions."""

import asyncio
from typing import Any


class FakeRemoteSearch:
    """In-memory fake for the remote search client.

    Returns predefined payloads per search term and records every call. In
    gated mode each call waits until the test releases it, which makes the
    order in which responses arrive controllable.
    """

    def __init__(self, *, gated: bool = False) -> None:
        self.gated = gated
        self.responses: dict[str, dict[str, Any]] = {}
        self.errors: dict[str, Exception] = {}
        self.default: dict[str, Any] = {"results": []}
        self.calls: list[str] = []
        self._gates: dict[str, asyncio.Event] = {}

    def add_response(self, term: str, *items: dict[str, Any]) -> None:
        """Register the items returned for ``term``."""
        self.responses[term] = {"results": list(items)}

    def add_error(self, term: str, exc: Exception) -> None:
        """Make searches for ``term`` raise ``exc``."""
        self.errors[term] = exc

    def release(self, term: str) -> None:
        """Let a gated call for ``term`` return."""
        self._gates.setdefault(term, asyncio.Event()).set()

    async def search(self, term: str) -> dict[str, Any]:
        self.calls.append(term)
        if self.gated:
            await self._gates.setdefault(term, asyncio.Event()).wait()
        else:
            await asyncio.sleep(0)
        if term in self.errors:
            raise self.errors[term]
        return self.responses.get(term, self.default)


async def wait_for_calls(fake: FakeRemoteSearch, count: int, *, timeout: float = 1.0) -> None:
    """Wait until ``fake`` has received ``count`` calls."""

    async def _poll() -> None:
        while len(fake.calls) < count:
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


def album_item(album_id: str, name: str = "", **extra: Any) -> dict[str, Any]:
    return {"Id": album_id, "Type": "MusicAlbum", "Name": name or album_id, **extra}


def track_item(track_id: str, album_id: str | None, name: str = "") -> dict[str, Any]:
    item: dict[str, Any] = {"Id": track_id, "Type": "Audio", "Name": name or track_id}
    if album_id is not None:
        item["AlbumId"] = album_id
    return item
