"""Command that prints every raw market-channel message for the given tokens."""

from __future__ import annotations

import signal
import sys
import threading
from typing import Optional, Sequence

import websocket

from mdengine.client import RECONNECT_DELAY_SECONDS, subscription_message

MARKET_CHANNEL_URL = "wss://ws-subscriptions-clob.polymarket.com/ws/market"
PING_INTERVAL_SECONDS = 30
_POLL_SECONDS = 0.1
_JOIN_TIMEOUT_SECONDS = 5.0


def _build_app(token_ids: Sequence[str]) -> websocket.WebSocketApp:
    message = subscription_message(token_ids)
    count = len(token_ids)

    def on_open(ws) -> None:
        print(f"[connected] Subscribing to {count} asset(s)...", flush=True)
        ws.send(message)

    def on_message(ws, text) -> None:
        print(f"{text}\n", flush=True)

    def on_error(ws, error) -> None:
        print(f"[error] {error}", file=sys.stderr, flush=True)

    def on_close(ws, *args) -> None:
        print("[disconnected]", flush=True)

    return websocket.WebSocketApp(
        MARKET_CHANNEL_URL,
        on_open=on_open,
        on_message=on_message,
        on_error=on_error,
        on_close=on_close,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    token_ids = list(sys.argv[1:] if argv is None else argv)
    if not token_ids:
        print("Usage: mdengine-listen <token_id> [token_id2 ...]", file=sys.stderr)
        return 1

    app = _build_app(token_ids)
    stop = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
    thread = threading.Thread(
        target=app.run_forever,
        kwargs={"ping_interval": PING_INTERVAL_SECONDS, "reconnect": RECONNECT_DELAY_SECONDS},
        name="listener-websocket",
        daemon=True,
    )
    try:
        thread.start()
        print("Listening... (Ctrl+C to quit)", flush=True)
        while not stop.is_set():
            stop.wait(_POLL_SECONDS)
    finally:
        app.close()
        thread.join(_JOIN_TIMEOUT_SECONDS)
        signal.signal(signal.SIGINT, previous_handler)

    print("\nDone.", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())