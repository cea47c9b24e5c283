# mdengine

An order book engine for Polymarket prediction markets. It subscribes to the
Polymarket market WebSocket feed, turns each message into a domain event
(book snapshot, price change, last trade, tick size change), numbers the
events in arrival order, keeps them in memory and maintains an up-to-date
order book for every asset it sees.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the engine

Follow a single market by giving its token id:

```
mdengine 6581861
```

Or let the engine pick the most active markets itself:

```
MDE_DISCOVERY_ENABLED=true mdengine
```

With discovery on, the engine asks the market listing API every
`MDE_DISCOVERY_INTERVAL` seconds for the `MDE_MARKETS_PER_POLL` active markets
with the highest 24-hour volume and subscribes to the first (YES) token of
each one it is not yet tracking, up to `MDE_MAX_TRACKED_MARKETS` in total.

With neither a token id nor discovery enabled, the engine prints its usage and
exits with status 1. While running it prints a statistics line every ten
seconds (number of markets, events per second, total events). Stop it with
Ctrl+C; it then prints the total number of events processed.

## Watching the raw feed

To see the raw messages the market channel sends for one or more tokens:

```
mdengine-listen 6581861 7777777
```

Every message is printed as received until you press Ctrl+C. This command
always connects to the Polymarket market channel with a 30 second ping and
does not read any of the settings below.

## Configuration

`mdengine` reads its settings from environment variables. `MDE_ENV` picks a
preset, `development` (the default) or `production`; the other variables
override single values of that preset.

| Variable                  | Meaning                                          | Development default  |
|---------------------------|--------------------------------------------------|----------------------|
| `MDE_ENV`                 | `development` or `production`                    | `development`        |
| `MDE_WEBSOCKET_URL`       | market WebSocket endpoint                        | Polymarket CLOB feed |
| `MDE_PING_INTERVAL`       | WebSocket ping interval in seconds               | 30                   |
| `MDE_GAMMA_API_URL`       | base URL of the market listing API               | Polymarket Gamma API |
| `MDE_SNAPSHOT_INTERVAL`   | store a book snapshot every N events; 0 disables | 10                   |
| `MDE_STORAGE_BACKEND`     | storage backend; only `memory` is supported      | `memory`             |
| `MDE_DISCOVERY_ENABLED`   | `true` or `1` to discover markets                | off                  |
| `MDE_MAX_TRACKED_MARKETS` | upper limit on tracked markets                   | 500                  |
| `MDE_DISCOVERY_INTERVAL`  | seconds between discovery polls                  | 1800                 |
| `MDE_MARKETS_PER_POLL`    | markets requested per poll                       | 50                   |

Integer variables that cannot be parsed fall back to the preset value.

`Settings.from_environment()` in `mdengine.settings` also reads
`MDE_DATA_DIRECTORY`, `MDE_WRITE_BUFFER_SIZE`, `MDE_S3_BUCKET`,
`MDE_S3_PREFIX`, `MDE_S3_REGION`, `MDE_S3_ENDPOINT` and `MDE_S3_SCHEME` into
`settings.storage`, but the `mdengine` command does not use them.

The `production` preset uses a 15 second ping, snapshots every 5 events,
discovery turned on, and sets the storage backend to `parquet`. Because that
backend is not available, run the production preset with
`MDE_STORAGE_BACKEND=memory`; otherwise the command exits with status 1.

## Using the library

The domain model can be used without any network connection:

```python
from mdengine.events import BookSnapshot
from mdengine.orderbook import OrderBook
from mdengine.values import MarketAsset, Price, PriceLevel, Quantity, Timestamp

asset = MarketAsset("0xbd31dc", "6581861")
snapshot = BookSnapshot(
    asset=asset,
    timestamp=Timestamp(1000),
    sequence_number=1,
    bids=[PriceLevel(Price(0.48), Quantity(30.0)), PriceLevel(Price(0.49), Quantity(20.0))],
    asks=[PriceLevel(Price(0.52), Quantity(25.0))],
    hash="0xabc",
)

book = OrderBook.empty(asset).apply(snapshot)
print(book.best_bid(), book.best_ask(), book.midpoint(), book.depth())
```

Books are immutable: `apply` returns a new book and leaves the old one as it
was. Bids are kept in descending and asks in ascending price order. Prices
must lie between 0 and 1, quantities and timestamps must not be negative;
values outside those limits raise `ValueError`. Asking an empty side for its
best price raises `LookupError`.

Other building blocks:

- `mdengine.parser.MessageParser.parse(message)` turns a raw feed message into
  a list of events; malformed JSON and unknown event types give no events.
- `mdengine.service.OrderBookService` ties a `MarketDataFeed` to an
  `OrderBookRepository`, numbers the events from 1 and answers
  `current_book(asset)`, `current_spread(asset)`, `midpoint(asset)`,
  `resolve_asset(token_id)`, `event_count()` and `book_count()`.
- `mdengine.repository.InMemoryOrderBookRepository` keeps every event and the
  latest snapshot per asset.
- `mdengine.client.PolymarketClient` is the WebSocket feed; it resends all
  subscriptions whenever the connection opens.
- `mdengine.discovery.MarketDiscovery(directory, api, discovery)` tracks
  discovered token ids. Given a directory, it saves them to
  `tracked_markets.json` there and `load()` restores them; given `None`, it
  keeps them in memory only.

## What it does not do

- Events and snapshots are kept in memory only and are lost when the engine
  stops. There is no file or object-store backend; `parquet` and `s3` are
  rejected.
- The `mdengine` command keeps its discovered markets in memory only, so a
  restarted engine starts discovery from scratch.
- There is no query interface to a running engine; books can only be read
  through the library.