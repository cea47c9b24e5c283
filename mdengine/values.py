"""Value objects for prices, sizes, timestamps, sides and market identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, order=True)
class Price:
    """A price expressed as a probability in the closed range [0, 1]."""

    value: float

    def __post_init__(self) -> None:
        value = float(self.value)
        if value < 0.0 or value > 1.0:
            raise ValueError(f"Price must be between 0 and 1, got: {value:f}")
        object.__setattr__(self, "value", value)

    @classmethod
    def from_string(cls, text: str) -> Price:
        """Parse a decimal string such as ``"0.456"``."""
        return cls(float(text))

    @classmethod
    def zero(cls) -> Price:
        return cls(0.0)


@dataclass(frozen=True, order=True)
class Quantity:
    """A non-negative size."""

    size: float

    def __post_init__(self) -> None:
        size = float(self.size)
        if size < 0.0:
            raise ValueError(f"Quantity must be non-negative, got: {size:f}")
        object.__setattr__(self, "size", size)

    @classmethod
    def from_string(cls, text: str) -> Quantity:
        """Parse a decimal string such as ``"219.217767"``."""
        return cls(float(text))

    @classmethod
    def zero(cls) -> Quantity:
        return cls(0.0)


@dataclass(frozen=True, order=True)
class Timestamp:
    """Milliseconds since the Unix epoch; never negative."""

    milliseconds: int

    def __post_init__(self) -> None:
        milliseconds = int(self.milliseconds)
        if milliseconds < 0:
            raise ValueError(f"Timestamp must be non-negative, got: {milliseconds}")
        object.__setattr__(self, "milliseconds", milliseconds)

    @classmethod
    def from_string(cls, text: str) -> Timestamp:
        """Parse an integer string of milliseconds."""
        return cls(int(text))


@dataclass(frozen=True, order=True)
class MarketAsset:
    """One outcome token of a market, ordered by condition id then token id."""

    condition_id: str
    token_id: str

    def __post_init__(self) -> None:
        if not self.condition_id:
            raise ValueError("MarketAsset condition_id must not be empty")
        if not self.token_id:
            raise ValueError("MarketAsset token_id must not be empty")


@dataclass(frozen=True, order=True)
class PriceLevel:
    """A price together with the size resting at it."""

    price: Price
    size: Quantity

    @classmethod
    def from_strings(cls, price: str, size: str) -> PriceLevel:
        return cls(Price.from_string(price), Quantity.from_string(size))


class Side(Enum):
    """Order side; the values are the stored integer codes."""

    BUY = 0
    SELL = 1


_SIDES = {"BUY": Side.BUY, "SELL": Side.SELL}


def side_from_string(text: str) -> Side:
    """Parse ``"BUY"`` or ``"SELL"``; anything else is rejected."""
    try:
        return _SIDES[text]
    except KeyError:
        raise ValueError(f"Invalid side: {text}") from None