"""Data models for the trading terminal."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

Action = Literal["BUY", "SELL"]
Sentiment = Literal["BULLISH", "BEARISH", "NEUTRAL"]

SENTIMENTS: tuple[str, ...] = ("BULLISH", "BEARISH", "NEUTRAL")


def normalize_symbol(symbol: str) -> str:
    """Return the canonical (stripped, uppercase) form of a ticker symbol."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValueError(f"Symbol must be a non-empty string, got {symbol!r}")
    return symbol.strip().upper()


class SyncStatus(Enum):
    """State of the most recent quote refresh."""

    INITIALIZING = "INITIALIZING"
    SYNCING = "SYNCING"
    UPDATED = "UPDATED"
    FAILED = "UPDATE FAILED"


@dataclass(frozen=True)
class PricePoint:
    """One sample of the display-only intraday chart."""

    time: str
    price: Decimal


@dataclass(frozen=True)
class Quote:
    """A partial quote as delivered by a refresh cycle."""

    price: Decimal
    change: Decimal
    change_percent: Decimal
    volume: Optional[str] = None


@dataclass
class Instrument:
    """A tradable symbol with its latest quote and display history."""

    symbol: str
    name: str = ""
    price: Decimal = Decimal("0")
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    volume: str = ""
    history: list[PricePoint] = field(default_factory=list)
    description: Optional[str] = None

    def apply_quote(self, quote: Quote, history: list[PricePoint]) -> None:
        self.price = quote.price
        self.change = quote.change
        self.change_percent = quote.change_percent
        if quote.volume:
            self.volume = quote.volume
        self.history = history


@dataclass
class Position:
    """Shares held in one instrument plus their weighted-average cost."""

    symbol: str
    quantity: int
    average_entry_price: Decimal
    last_price: Decimal

    @property
    def cost_basis(self) -> Decimal:
        return Decimal(self.quantity) * self.average_entry_price


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a buy or sell request against the ledger."""

    action: Action
    symbol: str
    quantity: int
    unit_price: Decimal
    accepted: bool
    reason: Optional[str] = None

    @property
    def notional(self) -> Decimal:
        return Decimal(self.quantity) * self.unit_price

    def __str__(self) -> str:
        text = f"{self.action} {self.quantity} {self.symbol} @ ${self.unit_price:,.2f}"
        if self.accepted:
            return f"{text} (${self.notional:,.2f})"
        return f"{text} REJECTED: {self.reason}"


@dataclass(frozen=True)
class Analysis:
    """Free-text commentary on an instrument with a sentiment call."""

    summary: str
    sentiment: Sentiment = "NEUTRAL"


@dataclass(frozen=True)
class NewsSource:
    title: str
    uri: str


@dataclass(frozen=True)
class NewsItem:
    """Market headlines plus the pages they were taken from."""

    text: str
    sources: list[NewsSource] = field(default_factory=list)
