"""Order book events as received from a market data feed."""

from __future__ import annotations

from dataclasses import dataclass

from mdengine.values import MarketAsset, Price, PriceLevel, Quantity, Side, Timestamp


@dataclass(frozen=True)
class OrderBookEvent:
    """Fields shared by every event: the asset, when, and its sequence number."""

    asset: MarketAsset
    timestamp: Timestamp
    sequence_number: int


@dataclass(frozen=True)
class PriceLevelDelta:
    """A change to the size resting at one price on one side."""

    asset_id: str
    price: Price
    new_size: Quantity
    side: Side
    best_bid: Price
    best_ask: Price


@dataclass(frozen=True)
class BookSnapshot(OrderBookEvent):
    """The full set of bid and ask levels, replacing the book."""

    bids: tuple[PriceLevel, ...]
    asks: tuple[PriceLevel, ...]
    hash: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "bids", tuple(self.bids))
        object.__setattr__(self, "asks", tuple(self.asks))


@dataclass(frozen=True)
class BookDelta(OrderBookEvent):
    """Individual level changes to patch into the book."""

    changes: tuple[PriceLevelDelta, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", tuple(self.changes))


@dataclass(frozen=True)
class TradeEvent(OrderBookEvent):
    """The price, size and side of the latest trade."""

    price: Price
    size: Quantity
    side: Side
    fee_rate_bps: str


@dataclass(frozen=True)
class TickSizeChange(OrderBookEvent):
    """A change of the market's minimum price increment."""

    old_tick_size: Price
    new_tick_size: Price