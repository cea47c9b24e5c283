"""Discovery of the most active markets, with the tracked set kept on disk."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Callable, Optional, Union

import requests

from mdengine.settings import ApiSettings, DiscoverySettings

TRACKED_FILE = "tracked_markets.json"
_CONNECT_TIMEOUT_SECONDS = 10
_TRANSFER_TIMEOUT_SECONDS = 30

NewIdsCallback = Callable[[list[str]], None]


def extract_token_ids(payload: Any) -> list[str]:
    """The first (YES side) token id of every market in a markets listing.

    ``clobTokenIds`` holds a JSON array encoded as a string; markets without it,
    or whose value does not decode to a non-empty array, are skipped.
    """
    if not isinstance(payload, list):
        return []
    ids: list[str] = []
    for market in payload:
        if not isinstance(market, dict) or "clobTokenIds" not in market:
            continue
        encoded = market["clobTokenIds"]
        if not isinstance(encoded, str):
            raise TypeError("clobTokenIds must be a JSON-encoded string")
        try:
            clob = json.loads(encoded)
        except ValueError:
            continue
        if isinstance(clob, list) and clob:
            first = clob[0]
            if not isinstance(first, str):
                raise TypeError("clobTokenIds entries must be strings")
            ids.append(first)
    return ids


class MarketDiscovery:
    """Tracks up to a fixed number of markets, adding the top ones on each poll.

    With no directory the tracked set lives in memory only.
    """

    def __init__(
        self,
        directory: Optional[Union[str, Path]],
        api: ApiSettings,
        discovery: DiscoverySettings,
    ) -> None:
        self._directory = Path(directory) if directory is not None else None
        self._api = api
        self._discovery = discovery
        self._tracked: set[str] = set()
        self._lock = threading.Lock()

    def load(self) -> None:
        """Restore the tracked ids from disk; a missing or unreadable file is ignored."""
        if self._directory is None:
            return
        try:
            content = (self._directory / TRACKED_FILE).read_text(encoding="utf-8")
            data = json.loads(content)
        except (OSError, ValueError):
            return
        if not isinstance(data, dict) or "tracked_token_ids" not in data:
            return
        stored = data["tracked_token_ids"]
        values = stored if isinstance(stored, list) else [stored]
        with self._lock:
            self._tracked.update(value for value in values if isinstance(value, str))

    def tracked_token_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._tracked)

    def tracked_count(self) -> int:
        with self._lock:
            return len(self._tracked)

    def at_capacity(self) -> bool:
        with self._lock:
            return len(self._tracked) >= self._discovery.max_tracked_markets

    def poll(self, on_new: Optional[NewIdsCallback] = None) -> int:
        """Add newly seen top markets, persist them, report them; return how many."""
        if self.at_capacity():
            return 0

        top_ids = self.fetch_top_token_ids(self._discovery.markets_per_poll)

        new_ids: list[str] = []
        with self._lock:
            remaining = self._discovery.max_tracked_markets - len(self._tracked)
            for token_id in top_ids:
                if remaining <= 0:
                    break
                if token_id not in self._tracked:
                    self._tracked.add(token_id)
                    new_ids.append(token_id)
                    remaining -= 1

        if new_ids:
            self._persist()
            if on_new is not None:
                on_new(new_ids)
        return len(new_ids)

    def fetch_top_token_ids(self, limit: int) -> list[str]:
        """Token ids of the active markets with the highest 24h volume."""
        url = (
            f"{self._api.gamma_api_base_url}/markets?active=true&closed=false"
            f"&limit={limit}&order=volume24hr&ascending=false"
        )
        try:
            response = requests.get(
                url, timeout=(_CONNECT_TIMEOUT_SECONDS, _TRANSFER_TIMEOUT_SECONDS)
            )
        except requests.RequestException:
            return []
        if response.status_code != 200:
            return []
        try:
            payload = json.loads(response.text)
        except ValueError:
            return []
        return extract_token_ids(payload)

    def _persist(self) -> None:
        if self._directory is None:
            return
        with self._lock:
            content = json.dumps({"tracked_token_ids": sorted(self._tracked)}, indent=2)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            (self._directory / TRACKED_FILE).write_text(content, encoding="utf-8")
        except OSError:
            return