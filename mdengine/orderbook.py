"""The order book aggregate: an immutable projection built from events."""

from __future__ import annotations

import dataclasses
import operator
from dataclasses import dataclass
from typing import Callable, Optional

from mdengine.events import BookDelta, BookSnapshot, OrderBookEvent, TickSizeChange, TradeEvent
from mdengine.values import MarketAsset, Price, PriceLevel, Quantity, Side, Timestamp

DEFAULT_TICK_SIZE = 0.01


@dataclass(frozen=True)
class Spread:
    """Best bid and best ask of a book."""

    best_bid: Price
    best_ask: Price

    def value(self) -> float:
        return self.best_ask.value - self.best_bid.value


def _update_levels(
    levels: tuple[PriceLevel, ...],
    price: Price,
    new_size: Quantity,
    before: Callable[[Price, Price], bool],
) -> tuple[PriceLevel, ...]:
    """Set, replace or remove the level at ``price`` keeping the list's order.

    ``before(a, b)`` is true when a level at price ``a`` sorts ahead of ``b``.
    """
    result = list(levels)
    existing = next((i for i, level in enumerate(result) if level.price == price), None)

    if new_size.size == 0.0:
        if existing is not None:
            del result[existing]
    elif existing is not None:
        result[existing] = PriceLevel(price, new_size)
    else:
        position = next(
            (i for i, level in enumerate(result) if not before(level.price, price)),
            len(result),
        )
        result.insert(position, PriceLevel(price, new_size))

    return tuple(result)


@dataclass(frozen=True)
class OrderBook:
    """Bids sorted by descending price, asks by ascending price.

    Applying an event returns a new book; the original is left untouched.
    """

    asset: MarketAsset
    bids: tuple[PriceLevel, ...] = ()
    asks: tuple[PriceLevel, ...] = ()
    latest_trade: Optional[TradeEvent] = None
    tick_size: Price = Price(DEFAULT_TICK_SIZE)
    timestamp: Timestamp = Timestamp(0)
    last_sequence_number: int = 0
    book_hash: str = ""

    @classmethod
    def empty(cls, asset: MarketAsset) -> OrderBook:
        return cls(asset)

    def apply(self, event: OrderBookEvent) -> OrderBook:
        """Return the book that results from applying ``event``."""
        if isinstance(event, BookSnapshot):
            return self._apply_snapshot(event)
        if isinstance(event, BookDelta):
            return self._apply_delta(event)
        if isinstance(event, TradeEvent):
            return dataclasses.replace(
                self,
                latest_trade=event,
                timestamp=event.timestamp,
                last_sequence_number=event.sequence_number,
            )
        if isinstance(event, TickSizeChange):
            return dataclasses.replace(
                self,
                tick_size=event.new_tick_size,
                timestamp=event.timestamp,
                last_sequence_number=event.sequence_number,
            )
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    def _apply_snapshot(self, event: BookSnapshot) -> OrderBook:
        return dataclasses.replace(
            self,
            bids=tuple(sorted(event.bids, key=lambda level: level.price, reverse=True)),
            asks=tuple(sorted(event.asks, key=lambda level: level.price)),
            timestamp=event.timestamp,
            last_sequence_number=event.sequence_number,
            book_hash=event.hash,
        )

    def _apply_delta(self, event: BookDelta) -> OrderBook:
        bids, asks = self.bids, self.asks
        for change in event.changes:
            if change.side is Side.BUY:
                bids = _update_levels(bids, change.price, change.new_size, operator.gt)
            else:
                asks = _update_levels(asks, change.price, change.new_size, operator.lt)
        return dataclasses.replace(
            self,
            bids=bids,
            asks=asks,
            timestamp=event.timestamp,
            last_sequence_number=event.sequence_number,
        )

    def spread(self) -> Spread:
        return Spread(self.best_bid(), self.best_ask())

    def depth(self) -> int:
        """The number of levels on the deeper side."""
        return max(len(self.bids), len(self.asks))

    def midpoint(self) -> Price:
        return Price((self.best_bid().value + self.best_ask().value) / 2.0)

    def best_bid(self) -> Price:
        if not self.bids:
            raise LookupError("No bids in order book")
        return self.bids[0].price

    def best_ask(self) -> Price:
        if not self.asks:
            raise LookupError("No asks in order book")
        return self.asks[0].price