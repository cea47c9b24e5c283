"""Turns raw market-channel JSON messages into order book events."""

from __future__ import annotations

import json
from collections import defaultdict
from typing import Any, Mapping

from mdengine.events import (
    BookDelta,
    BookSnapshot,
    OrderBookEvent,
    PriceLevelDelta,
    TickSizeChange,
    TradeEvent,
)
from mdengine.values import MarketAsset, Price, PriceLevel, Quantity, Timestamp, side_from_string


def _levels(entries: Any) -> list[PriceLevel]:
    return [PriceLevel.from_strings(entry["price"], entry["size"]) for entry in entries]


def _parse_book(obj: Mapping[str, Any]) -> BookSnapshot:
    return BookSnapshot(
        asset=MarketAsset(obj["market"], obj["asset_id"]),
        timestamp=Timestamp.from_string(obj["timestamp"]),
        sequence_number=0,
        bids=_levels(obj["bids"]),
        asks=_levels(obj["asks"]),
        hash=obj.get("hash", ""),
    )


def _parse_price_change(obj: Mapping[str, Any]) -> list[BookDelta]:
    """One delta per asset id, in ascending asset id order."""
    market = obj["market"]
    timestamp = Timestamp.from_string(obj["timestamp"])

    by_asset: dict[str, list[PriceLevelDelta]] = defaultdict(list)
    for change in obj["price_changes"]:
        asset_id = change["asset_id"]
        by_asset[asset_id].append(
            PriceLevelDelta(
                asset_id=asset_id,
                price=Price.from_string(change["price"]),
                new_size=Quantity.from_string(change["size"]),
                side=side_from_string(change["side"]),
                best_bid=Price.from_string(change["best_bid"]),
                best_ask=Price.from_string(change["best_ask"]),
            )
        )

    return [
        BookDelta(
            asset=MarketAsset(market, asset_id),
            timestamp=timestamp,
            sequence_number=0,
            changes=by_asset[asset_id],
        )
        for asset_id in sorted(by_asset)
    ]


def _parse_trade(obj: Mapping[str, Any]) -> TradeEvent:
    return TradeEvent(
        asset=MarketAsset(obj["market"], obj["asset_id"]),
        timestamp=Timestamp.from_string(obj["timestamp"]),
        sequence_number=0,
        price=Price.from_string(obj["price"]),
        size=Quantity.from_string(obj["size"]),
        side=side_from_string(obj["side"]),
        fee_rate_bps=obj.get("fee_rate_bps", "0"),
    )


def _parse_tick_size_change(obj: Mapping[str, Any]) -> TickSizeChange:
    return TickSizeChange(
        asset=MarketAsset(obj["market"], obj["asset_id"]),
        timestamp=Timestamp.from_string(obj["timestamp"]),
        sequence_number=0,
        old_tick_size=Price.from_string(obj["old_tick_size"]),
        new_tick_size=Price.from_string(obj["new_tick_size"]),
    )


class MessageParser:
    """Parses WebSocket messages; one message may yield several events."""

    def parse(self, message: str) -> list[OrderBookEvent]:
        """Return the events in ``message``; malformed JSON or unknown types yield none."""
        try:
            payload = json.loads(message)
        except ValueError:
            return []

        items = payload if isinstance(payload, list) else [payload]
        events: list[OrderBookEvent] = []
        for obj in items:
            if not isinstance(obj, dict) or "event_type" not in obj:
                continue
            event_type = obj["event_type"]
            if not isinstance(event_type, str):
                raise TypeError("event_type must be a string")

            if event_type == "book":
                events.append(_parse_book(obj))
            elif event_type == "price_change":
                events.extend(_parse_price_change(obj))
            elif event_type == "last_trade_price":
                events.append(_parse_trade(obj))
            elif event_type == "tick_size_change":
                events.append(_parse_tick_size_change(obj))
        return events