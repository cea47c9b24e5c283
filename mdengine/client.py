"""WebSocket client for the market channel, delivering parsed order book events."""

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Iterable, Optional

import websocket

from mdengine.parser import MessageParser
from mdengine.service import EventCallback, MarketDataFeed
from mdengine.settings import WebSocketSettings

RECONNECT_DELAY_SECONDS = 5
_JOIN_TIMEOUT_SECONDS = 5.0

AppFactory = Callable[..., Any]


def subscription_message(token_ids: Iterable[str]) -> str:
    """The JSON text that subscribes the market channel to ``token_ids``."""
    return json.dumps({"assets_ids": list(token_ids), "type": "market"})


class PolymarketClient(MarketDataFeed):
    """Keeps a WebSocket connection open and feeds every parsed event to a callback.

    All subscribed tokens are (re)sent whenever the connection opens, and a token
    subscribed while connected is sent right away.
    """

    def __init__(
        self,
        settings: Optional[WebSocketSettings] = None,
        *,
        app_factory: Optional[AppFactory] = None,
    ) -> None:
        self._settings = settings if settings is not None else WebSocketSettings()
        self._app_factory = app_factory if app_factory is not None else websocket.WebSocketApp
        self._parser = MessageParser()
        self._on_event: Optional[EventCallback] = None
        self._token_ids: list[str] = []
        self._connected = False
        self._callback_lock = threading.Lock()
        self._sub_lock = threading.Lock()
        self._app: Any = None
        self._thread: Optional[threading.Thread] = None

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def token_ids(self) -> list[str]:
        with self._sub_lock:
            return list(self._token_ids)

    def set_on_event(self, callback: EventCallback) -> None:
        with self._callback_lock:
            self._on_event = callback

    def subscribe(self, token_id: str) -> None:
        with self._sub_lock:
            self._token_ids.append(token_id)
            if self._connected:
                self._send_subscribe()

    def start(self) -> None:
        """Open the connection on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._app = self._app_factory(
            self._settings.url,
            on_open=lambda ws: self.handle_open(),
            on_message=lambda ws, message: self.handle_message(message),
            on_close=lambda ws, *args: self.handle_close(),
        )
        self._thread = threading.Thread(
            target=self._app.run_forever,
            kwargs={
                "ping_interval": self._settings.ping_interval_seconds,
                "reconnect": RECONNECT_DELAY_SECONDS,
            },
            name="market-websocket",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Close the connection and wait for the background thread to end."""
        if self._app is not None:
            self._app.close()
        if self._thread is not None:
            self._thread.join(_JOIN_TIMEOUT_SECONDS)
            self._thread = None
        self._connected = False

    def handle_open(self) -> None:
        self._connected = True
        with self._sub_lock:
            if self._token_ids:
                self._send_subscribe()

    def handle_message(self, message: str) -> None:
        events = self._parser.parse(message)
        with self._callback_lock:
            if self._on_event is not None:
                for event in events:
                    self._on_event(event)

    def handle_close(self) -> None:
        self._connected = False

    def _send_subscribe(self) -> None:
        if self._app is not None:
            self._app.send(subscription_message(self._token_ids))