"""Sources for transposition tables and songs.

Provides DocumentStoreClient for reading tables and songs from the
document store over HTTP, and JSON file sources for offline use.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import requests

from tabkey.logging_config import get_logger

logger = get_logger(__name__)

TABLE_DATABASE = "chord"
TABLE_COLLECTION = "table"
SONG_DATABASE = "tab"
SONG_COLLECTION = "song"

# Chord references that must be populated for tables to be displayable
TABLE_POPULATES = [
    "keySignature",
    "type",
    "rows.major",
    "rows.naturalMinor",
    "rows.harmonicMinor",
    "rows.melodicMinor",
    "chromaticRows.one",
    "chromaticRows.two",
    "chromaticRows.three",
    "chromaticRows.four",
]


class TableSource(Protocol):
    """Anything that can fetch the ordered transposition tables."""

    def fetch_tables(self) -> List[Dict[str, Any]]: ...


class SongSource(Protocol):
    """Anything that can fetch a song document by ID."""

    def get_song(self, song_id: str) -> Optional[Dict[str, Any]]: ...


class DocumentStoreError(Exception):
    """Error communicating with the document store."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentStoreClient:
    """HTTP client for the document store's data provider API.

    Uses an optional Bearer token from the TABKEY_API_TOKEN environment
    variable; anonymous read access is enough for songs and tables.

    Attributes:
        base_url: Base URL of the document store
        timeout: Request timeout in seconds
    """

    def __init__(self, base_url: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = os.environ.get("TABKEY_API_TOKEN")

    def _headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """POST a data provider request and return the decoded body.

        Args:
            endpoint: Data provider endpoint name (e.g., "find")
            payload: Request body

        Returns:
            Decoded JSON response

        Raises:
            DocumentStoreError: If the request fails
        """
        url = f"{self.base_url}/data-provider/{endpoint}"
        try:
            response = requests.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.ConnectionError as e:
            raise DocumentStoreError(f"Cannot connect to document store at {self.base_url}: {e}")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise DocumentStoreError(
                f"Document store request failed (HTTP {status}): {e}", status_code=status
            )
        except requests.exceptions.RequestException as e:
            raise DocumentStoreError(f"Document store request failed: {e}")
        except ValueError as e:
            raise DocumentStoreError(f"Invalid JSON from document store: {e}")

    def fetch_tables(self) -> List[Dict[str, Any]]:
        """Fetch all transposition tables in store order.

        Returns:
            List of table documents with populated chord references

        Raises:
            DocumentStoreError: If the request fails or the body is not a list
        """
        data = self._post(
            "find",
            {
                "database": TABLE_DATABASE,
                "collection": TABLE_COLLECTION,
                "query": {},
                "populates": TABLE_POPULATES,
            },
        )
        if not isinstance(data, list):
            raise DocumentStoreError("Unexpected tables response: expected a list")

        logger.debug(f"Fetched {len(data)} tables from {self.base_url}")
        return data

    def get_song(self, song_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a song document by ID.

        Args:
            song_id: The song ID

        Returns:
            Song document or None if not found

        Raises:
            DocumentStoreError: If the request fails
        """
        data = self._post(
            "findOne",
            {
                "database": SONG_DATABASE,
                "collection": SONG_COLLECTION,
                "query": {"_id": song_id},
            },
        )
        return data or None


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


class JsonTableSource:
    """Tables read from a local JSON file (a list, or {"tables": [...]})."""

    def __init__(self, path: Path):
        self.path = path

    def fetch_tables(self) -> List[Dict[str, Any]]:
        """Read tables from the JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file has no table list
        """
        data = _read_json(self.path)
        if isinstance(data, dict):
            data = data.get("tables")
        if not isinstance(data, list):
            raise ValueError(f"No table list found in {self.path}")
        return data


class JsonSongSource:
    """Songs read from a local JSON file (one song, or a list of songs)."""

    def __init__(self, path: Path):
        self.path = path

    def get_song(self, song_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Get a song from the file.

        Args:
            song_id: Song ID to pick from a list; the first song if None

        Returns:
            Song document or None if not found
        """
        data = _read_json(self.path)
        songs = data if isinstance(data, list) else [data]

        if song_id is None:
            return songs[0] if songs else None

        return next((s for s in songs if s.get("_id") == song_id), None)
