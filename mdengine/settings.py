"""Runtime settings with development and production presets and environment overrides."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


@dataclass
class WebSocketSettings:
    url: str = "wss://ws-subscriptions-clob.polymarket.com/ws/market"
    ping_interval_seconds: int = 30


@dataclass
class ApiSettings:
    gamma_api_base_url: str = "https://gamma-api.polymarket.com"


@dataclass
class ServiceSettings:
    snapshot_interval_seconds: int = 10


@dataclass
class DiscoverySettings:
    enabled: bool = False
    max_tracked_markets: int = 500
    discovery_interval_seconds: int = 1800
    markets_per_poll: int = 50


@dataclass
class StorageSettings:
    backend: str = "memory"  # "memory", "parquet" or "s3"
    data_directory: str = "data"
    write_buffer_size: int = 1024
    s3_bucket: str = ""
    s3_prefix: str = "mde"
    s3_region: str = "us-east-1"
    s3_endpoint_override: str = ""
    s3_scheme: str = "https"


def _env_str(environ: Mapping[str, str], name: str, fallback: str) -> str:
    return environ.get(name, fallback)


def _env_bool(environ: Mapping[str, str], name: str, fallback: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return fallback
    return raw in ("true", "1")


def _env_int(environ: Mapping[str, str], name: str, fallback: int) -> int:
    """Read a leading integer; anything unparsable or out of range yields the fallback."""
    raw = environ.get(name)
    if raw is None:
        return fallback
    match = _INT_PREFIX.match(raw)
    if match is None:
        return fallback
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        return fallback
    return value


@dataclass
class Settings:
    websocket: WebSocketSettings = field(default_factory=WebSocketSettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    service: ServiceSettings = field(default_factory=ServiceSettings)
    discovery: DiscoverySettings = field(default_factory=DiscoverySettings)
    storage: StorageSettings = field(default_factory=StorageSettings)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Pick a preset from ``MDE_ENV`` and apply ``MDE_*`` overrides."""
        env = os.environ if environ is None else environ
        preset = _env_str(env, "MDE_ENV", "development")
        s = cls.production() if preset == "production" else cls.development()

        s.websocket.url = _env_str(env, "MDE_WEBSOCKET_URL", s.websocket.url)
        s.websocket.ping_interval_seconds = _env_int(
            env, "MDE_PING_INTERVAL", s.websocket.ping_interval_seconds
        )
        s.api.gamma_api_base_url = _env_str(env, "MDE_GAMMA_API_URL", s.api.gamma_api_base_url)
        s.service.snapshot_interval_seconds = _env_int(
            env, "MDE_SNAPSHOT_INTERVAL", s.service.snapshot_interval_seconds
        )

        st = s.storage
        st.backend = _env_str(env, "MDE_STORAGE_BACKEND", st.backend)
        st.data_directory = _env_str(env, "MDE_DATA_DIRECTORY", st.data_directory)
        st.write_buffer_size = _env_int(env, "MDE_WRITE_BUFFER_SIZE", st.write_buffer_size)
        st.s3_bucket = _env_str(env, "MDE_S3_BUCKET", st.s3_bucket)
        st.s3_prefix = _env_str(env, "MDE_S3_PREFIX", st.s3_prefix)
        st.s3_region = _env_str(env, "MDE_S3_REGION", st.s3_region)
        st.s3_endpoint_override = _env_str(env, "MDE_S3_ENDPOINT", st.s3_endpoint_override)
        st.s3_scheme = _env_str(env, "MDE_S3_SCHEME", st.s3_scheme)

        d = s.discovery
        d.enabled = _env_bool(env, "MDE_DISCOVERY_ENABLED", d.enabled)
        d.max_tracked_markets = _env_int(env, "MDE_MAX_TRACKED_MARKETS", d.max_tracked_markets)
        d.discovery_interval_seconds = _env_int(
            env, "MDE_DISCOVERY_INTERVAL", d.discovery_interval_seconds
        )
        d.markets_per_poll = _env_int(env, "MDE_MARKETS_PER_POLL", d.markets_per_poll)
        return s

    @classmethod
    def development(cls) -> Settings:
        s = cls()
        s.websocket.ping_interval_seconds = 30
        s.service.snapshot_interval_seconds = 10
        s.storage.data_directory = "data/dev"
        return s

    @classmethod
    def production(cls) -> Settings:
        s = cls()
        s.websocket.ping_interval_seconds = 15
        s.service.snapshot_interval_seconds = 5
        s.storage.backend = "parquet"
        s.storage.data_directory = "data/prod"
        s.storage.write_buffer_size = 4096
        s.discovery.enabled = True
        return s