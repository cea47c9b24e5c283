import pytest

from mdengine.events import BookDelta, BookSnapshot, PriceLevelDelta, TradeEvent
from mdengine.repository import InMemoryOrderBookRepository
from mdengine.service import MarketDataFeed, OrderBookService
from mdengine.values import MarketAsset, Price, PriceLevel, Quantity, Side, Timestamp

ASSET = MarketAsset("0xbd31dc", "6581861")


class FakeMarketDataFeed(MarketDataFeed):
    def __init__(self):
        self.on_event = None
        self.subscribed = []
        self.running = False

    def set_on_event(self, callback):
        self.on_event = callback

    def subscribe(self, token_id):
        self.subscribed.append(token_id)

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def emit(self, event):
        if self.on_event:
            self.on_event(event)


@pytest.fixture
def repo():
    return InMemoryOrderBookRepository()


@pytest.fixture
def feed():
    return FakeMarketDataFeed()


def make_snapshot():
    return BookSnapshot(
        ASSET,
        Timestamp(1000),
        0,
        bids=[PriceLevel(Price(0.48), Quantity(30.0)), PriceLevel(Price(0.49), Quantity(20.0))],
        asks=[PriceLevel(Price(0.52), Quantity(25.0)), PriceLevel(Price(0.53), Quantity(60.0))],
        hash="0xabc",
    )


def make_trade():
    return TradeEvent(ASSET, Timestamp(2000), 0, Price(0.50), Quantity(10.0), Side.BUY, "0")


def make_delta(ms=2000):
    return BookDelta(
        ASSET,
        Timestamp(ms),
        0,
        changes=[
            PriceLevelDelta(
                "6581861", Price(0.50), Quantity(100.0), Side.BUY, Price(0.50), Price(0.52)
            )
        ],
    )


def test_persists_event_and_updates_projection(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    assert repo.event_count() == 1
    book = service.current_book(ASSET)
    assert book.depth() == 2
    assert book.best_bid().value == pytest.approx(0.49)
    assert book.best_ask().value == pytest.approx(0.52)


def test_assigns_sequence_numbers(repo, feed):
    OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    feed.emit(make_trade())
    events = repo.events()
    assert events[0].sequence_number == 1
    assert events[1].sequence_number == 2


def test_applies_multiple_events_in_sequence(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    feed.emit(make_delta())
    book = service.current_book(ASSET)
    assert book.depth() == 3
    assert book.best_bid().value == pytest.approx(0.50)


def test_tracks_latest_trade(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    feed.emit(make_trade())
    book = service.current_book(ASSET)
    assert book.latest_trade is not None
    assert book.latest_trade.price.value == pytest.approx(0.50)


def test_get_current_spread(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    spread = service.current_spread(ASSET)
    assert spread.best_bid.value == pytest.approx(0.49)
    assert spread.best_ask.value == pytest.approx(0.52)
    assert spread.value() == pytest.approx(0.03, abs=1e-10)


def test_get_midpoint(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    assert service.midpoint(ASSET).value == pytest.approx(0.505)


def test_throws_on_unknown_asset(repo, feed):
    service = OrderBookService(repo, feed)
    with pytest.raises(LookupError):
        service.current_book(MarketAsset("0x000", "999"))


def test_snapshots_at_configured_interval(repo, feed):
    OrderBookService(repo, feed, snapshot_interval=3)
    feed.emit(make_snapshot())
    assert repo.has_snapshot(ASSET) is False
    feed.emit(make_trade())
    assert repo.has_snapshot(ASSET) is False
    feed.emit(make_delta(3000))
    assert repo.has_snapshot(ASSET) is True
    assert repo.latest_snapshot(ASSET).last_sequence_number == 3


def test_resolve_asset_finds_known_token(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    resolved = service.resolve_asset("6581861")
    assert resolved == MarketAsset("0xbd31dc", "6581861")


def test_resolve_asset_returns_none_for_unknown(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    assert service.resolve_asset("unknown_token") is None


def test_event_count_starts_at_zero(repo, feed):
    service = OrderBookService(repo, feed)
    assert service.event_count() == 0
    assert service.book_count() == 0


def test_event_count_increments_with_events(repo, feed):
    service = OrderBookService(repo, feed)
    feed.emit(make_snapshot())
    assert service.event_count() == 1
    feed.emit(make_trade())
    assert service.event_count() == 2
    assert service.book_count() == 1


def test_no_snapshot_when_interval_zero(repo, feed):
    OrderBookService(repo, feed, snapshot_interval=0)
    feed.emit(make_snapshot())
    feed.emit(make_snapshot())
    feed.emit(make_snapshot())
    assert repo.has_snapshot(ASSET) is False


def test_lifecycle_delegates_to_feed(repo, feed):
    service = OrderBookService(repo, feed)
    service.subscribe("6581861")
    service.start()
    assert feed.subscribed == ["6581861"]
    assert feed.running is True
    service.stop()
    assert feed.running is False