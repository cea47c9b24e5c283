import pytest

from mdengine.events import TradeEvent
from mdengine.orderbook import OrderBook
from mdengine.repository import InMemoryOrderBookRepository, OrderBookRepository
from mdengine.values import MarketAsset, Price, Quantity, Side, Timestamp

ASSET = MarketAsset("0xbd31dc", "6581861")
OTHER = MarketAsset("0xother", "999")


def make_trade(asset, seq):
    return TradeEvent(asset, Timestamp(2000), seq, Price(0.5), Quantity(10.0), Side.BUY, "0")


def test_base_class_cannot_be_instantiated():
    with pytest.raises(TypeError):
        OrderBookRepository()


def test_append_keeps_events_in_order():
    repo = InMemoryOrderBookRepository()
    events = [make_trade(ASSET, 1), make_trade(OTHER, 2), make_trade(ASSET, 3)]
    for event in events:
        repo.append_event(event)
    assert repo.event_count() == len(events)
    assert repo.events() == events


def test_events_since_filters_by_asset_and_sequence():
    repo = InMemoryOrderBookRepository()
    first, other, last = make_trade(ASSET, 1), make_trade(OTHER, 2), make_trade(ASSET, 3)
    for event in (first, other, last):
        repo.append_event(event)
    assert repo.events_since(ASSET, 0) == [first, last]
    assert repo.events_since(ASSET, 1) == [last]
    assert repo.events_since(ASSET, 3) == []
    assert repo.events_since(OTHER, 0) == [other]


def test_events_returns_a_copy():
    repo = InMemoryOrderBookRepository()
    repo.append_event(make_trade(ASSET, 1))
    repo.events().clear()
    assert repo.event_count() == 1


def test_latest_snapshot_missing_is_none():
    repo = InMemoryOrderBookRepository()
    assert repo.latest_snapshot(ASSET) is None
    assert repo.has_snapshot(ASSET) is False


def test_store_snapshot_replaces_previous():
    repo = InMemoryOrderBookRepository()
    first = OrderBook.empty(ASSET)
    second = first.apply(make_trade(ASSET, 5))
    repo.store_snapshot(first)
    repo.store_snapshot(second)
    assert repo.has_snapshot(ASSET) is True
    assert repo.latest_snapshot(ASSET) == second
    assert repo.has_snapshot(OTHER) is False