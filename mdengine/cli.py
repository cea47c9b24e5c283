"""Command that streams market data into order books and reports throughput."""

from __future__ import annotations

import signal
import sys
import threading
import time
from typing import Optional, Sequence

from mdengine.client import PolymarketClient
from mdengine.discovery import MarketDiscovery
from mdengine.repository import InMemoryOrderBookRepository
from mdengine.service import OrderBookService
from mdengine.settings import Settings

STATS_INTERVAL_SECONDS = 10
_JOIN_TIMEOUT_SECONDS = 5.0
_UNAVAILABLE_BACKENDS = {"s3": "S3", "parquet": "Parquet"}


def _run_discovery(
    discovery: MarketDiscovery,
    service: OrderBookService,
    interval_seconds: int,
    stop: threading.Event,
) -> None:
    def subscribe_all(new_ids: list[str]) -> None:
        for token_id in new_ids:
            service.subscribe(token_id)

    while not stop.is_set():
        try:
            added = discovery.poll(subscribe_all)
            if added > 0:
                print(
                    f"[discovery] Added {added} new markets, "
                    f"total={discovery.tracked_count()}",
                    flush=True,
                )
        except Exception as exc:  # a failed poll must not end discovery
            print(f"[discovery] Poll error: {exc}", file=sys.stderr, flush=True)
        stop.wait(max(interval_seconds, 0))


def _report_stats(service: OrderBookService, stop: threading.Event) -> None:
    last_count = 0
    last_time = time.monotonic()
    while not stop.is_set():
        if stop.wait(STATS_INTERVAL_SECONDS):
            break
        now = time.monotonic()
        elapsed = now - last_time
        current = service.event_count()
        per_second = (current - last_count) / elapsed if elapsed > 0 else 0.0
        print(
            f"[stats] markets={service.book_count()} events/sec={int(per_second)} "
            f"total_events={current}",
            flush=True,
        )
        last_count = current
        last_time = now


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    settings = Settings.from_environment()
    seed_token_id = args[0] if args else ""

    if not seed_token_id and not settings.discovery.enabled:
        print("Usage: mdengine [token_id]", file=sys.stderr)
        print(
            "       Set MDE_DISCOVERY_ENABLED=true for auto-discovery mode.",
            file=sys.stderr,
        )
        return 1

    label = _UNAVAILABLE_BACKENDS.get(settings.storage.backend)
    if label is not None:
        print(
            f"{label} backend requested but not available; "
            "only the memory backend is supported.",
            file=sys.stderr,
        )
        return 1

    repository = InMemoryOrderBookRepository()
    client = PolymarketClient(settings.websocket)
    service = OrderBookService(repository, client, settings.service.snapshot_interval_seconds)

    if seed_token_id:
        service.subscribe(seed_token_id)

    discovery: Optional[MarketDiscovery] = None
    if settings.discovery.enabled:
        discovery = MarketDiscovery(None, settings.api, settings.discovery)
        discovery.load()
        for token_id in discovery.tracked_token_ids():
            service.subscribe(token_id)
        print(f"[discovery] Restored {discovery.tracked_count()} tracked markets", flush=True)

    stop = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
    discovery_thread: Optional[threading.Thread] = None
    try:
        service.start()
        print("[engine] Started", flush=True)

        if discovery is not None:
            discovery_thread = threading.Thread(
                target=_run_discovery,
                args=(discovery, service, settings.discovery.discovery_interval_seconds, stop),
                name="market-discovery",
                daemon=True,
            )
            discovery_thread.start()

        _report_stats(service, stop)
    finally:
        stop.set()
        service.stop()
        if discovery_thread is not None:
            discovery_thread.join(_JOIN_TIMEOUT_SECONDS)
        signal.signal(signal.SIGINT, previous_handler)

    print(f"\n[engine] Done. Processed {service.event_count()} events.", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())