"""Order book engine for Polymarket market data: domain model, feed parser, in-memory storage and commands."""

__version__ = "0.1.0"