"""Configuration constants for fintunes-search."""

import json
from dataclasses import dataclass
from pathlib import Path

# Maximum fuzzy dissimilarity (0 = exact, 1 = unrelated) for a local match.
FUZZY_THRESHOLD: float = 0.1

# Entity fields the fuzzy index matches against.
SEARCH_KEYS: tuple[str, ...] = ("name", "album_artist", "artists")

# Quiet period, in seconds, before a query is sent to the server.
DEBOUNCE_WINDOW: float = 0.05

# HTTP timeout for Jellyfin requests, in seconds.
REQUEST_TIMEOUT: float = 10.0

# Maximum number of items requested from the remote search endpoint.
SEARCH_LIMIT: int = 50

# Remote item types that take part in search.
CONTAINER_KINDS: frozenset[str] = frozenset({"MusicAlbum"})
LEAF_KINDS: frozenset[str] = frozenset({"Audio"})
REMOTE_ITEM_TYPES: tuple[str, ...] = ("MusicAlbum", "Audio")

# Jellyfin credentials. First file found is used.
CREDENTIAL_FILES: list[Path] = [
    Path("~/.config/fintunes/credentials.json").expanduser(),
    Path("~/.fintunes/credentials.json").expanduser(),
]

# Directory with the cached catalog. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/fintunes").expanduser(),
    Path("~/.fintunes").expanduser(),
]

CATALOG_FILENAME: str = "catalog.json"


@dataclass(frozen=True)
class JellyfinCredentials:
    """Connection details for a Jellyfin server."""

    server_url: str
    user_id: str
    access_token: str


def load_credentials(paths: list[Path] | None = None) -> JellyfinCredentials:
    """Read Jellyfin credentials from the first existing credentials file.

    Raises:
        RuntimeError: If no file exists or a file lacks a required key.
    """
    candidates = paths if paths is not None else CREDENTIAL_FILES
    for path in candidates:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            continue
        missing = {"server_url", "user_id", "access_token"} - raw.keys()
        if missing:
            msg = f"Credentials file {str(path)!r} is missing keys: {sorted(missing)!r}"
            raise RuntimeError(msg)
        return JellyfinCredentials(
            server_url=raw["server_url"].rstrip("/"),
            user_id=raw["user_id"],
            access_token=raw["access_token"],
        )
    msg = f"Cannot find Jellyfin credentials, was looking at {candidates!r}"
    raise RuntimeError(msg)


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the preferred default."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
