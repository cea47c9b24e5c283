"""The order book service: numbers incoming events, stores them and keeps books current."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from typing import Callable, Optional

from mdengine.events import OrderBookEvent
from mdengine.orderbook import OrderBook, Spread
from mdengine.repository import OrderBookRepository
from mdengine.values import MarketAsset, Price

EventCallback = Callable[[OrderBookEvent], None]


class MarketDataFeed(ABC):
    """A source of order book events."""

    @abstractmethod
    def set_on_event(self, callback: EventCallback) -> None:
        """Register the function that receives every event."""

    @abstractmethod
    def subscribe(self, token_id: str) -> None:
        """Ask for events of one token."""

    @abstractmethod
    def start(self) -> None:
        """Begin delivering events."""

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events."""


class OrderBookService:
    """Assigns sequence numbers, persists events and projects them into books."""

    def __init__(
        self,
        repository: OrderBookRepository,
        feed: MarketDataFeed,
        snapshot_interval: int = 1000,
    ) -> None:
        self._repository = repository
        self._feed = feed
        self._snapshot_interval = snapshot_interval
        self._books: dict[MarketAsset, OrderBook] = {}
        self._next_sequence_number = 1
        feed.set_on_event(self.on_event)

    def subscribe(self, token_id: str) -> None:
        self._feed.subscribe(token_id)

    def start(self) -> None:
        self._feed.start()

    def stop(self) -> None:
        self._feed.stop()

    def on_event(self, event: OrderBookEvent) -> None:
        numbered = dataclasses.replace(event, sequence_number=self._next_sequence_number)
        self._next_sequence_number += 1

        self._repository.append_event(numbered)

        asset = numbered.asset
        book = self._books.get(asset) or OrderBook.empty(asset)
        book = book.apply(numbered)
        self._books[asset] = book

        self._maybe_snapshot(book)

    def _maybe_snapshot(self, book: OrderBook) -> None:
        interval = self._snapshot_interval
        if interval > 0 and book.last_sequence_number % interval == 0:
            self._repository.store_snapshot(book)

    def current_book(self, asset: MarketAsset) -> OrderBook:
        try:
            return self._books[asset]
        except KeyError:
            raise LookupError("No book for asset") from None

    def current_spread(self, asset: MarketAsset) -> Spread:
        return self.current_book(asset).spread()

    def midpoint(self, asset: MarketAsset) -> Price:
        return self.current_book(asset).midpoint()

    def resolve_asset(self, token_id: str) -> Optional[MarketAsset]:
        """The first known asset, in asset order, carrying ``token_id``."""
        return next((asset for asset in sorted(self._books) if asset.token_id == token_id), None)

    def event_count(self) -> int:
        return self._next_sequence_number - 1

    def book_count(self) -> int:
        return len(self._books)