"""Storage of order book events and book snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from mdengine.events import OrderBookEvent
from mdengine.orderbook import OrderBook
from mdengine.values import MarketAsset


class OrderBookRepository(ABC):
    """Events are the source of truth; snapshots are a projection for fast reads."""

    @abstractmethod
    def append_event(self, event: OrderBookEvent) -> None:
        """Persist one event."""

    @abstractmethod
    def events_since(self, asset: MarketAsset, sequence_number: int) -> list[OrderBookEvent]:
        """Events for ``asset`` with a sequence number greater than the one given."""

    @abstractmethod
    def store_snapshot(self, book: OrderBook) -> None:
        """Persist ``book`` as the latest snapshot of its asset."""

    @abstractmethod
    def latest_snapshot(self, asset: MarketAsset) -> Optional[OrderBook]:
        """The latest stored book for ``asset``, or None."""


class InMemoryOrderBookRepository(OrderBookRepository):
    """Keeps every event and the latest snapshot per asset in memory."""

    def __init__(self) -> None:
        self._events: list[OrderBookEvent] = []
        self._snapshots: dict[MarketAsset, OrderBook] = {}

    def append_event(self, event: OrderBookEvent) -> None:
        self._events.append(event)

    def events_since(self, asset: MarketAsset, sequence_number: int) -> list[OrderBookEvent]:
        return [
            event
            for event in self._events
            if event.asset == asset and event.sequence_number > sequence_number
        ]

    def store_snapshot(self, book: OrderBook) -> None:
        self._snapshots[book.asset] = book

    def latest_snapshot(self, asset: MarketAsset) -> Optional[OrderBook]:
        return self._snapshots.get(asset)

    def event_count(self) -> int:
        return len(self._events)

    def events(self) -> list[OrderBookEvent]:
        """All stored events in arrival order."""
        return list(self._events)

    def has_snapshot(self, asset: MarketAsset) -> bool:
        return asset in self._snapshots