"""
Brutal Ticker - A simulated trading terminal with a virtual cash ledger.

Exports:
    Instrument: Dataclass for a watch-list entry with quote and chart history
    Quote: Dataclass for a partial quote delivered by a refresh cycle
    Position: Dataclass for shares held plus weighted-average cost
    TradeResult: Dataclass describing an accepted or rejected trade
    InstrumentRegistry: The watch-list, with de-duplication and quote merging
    Ledger: Cash balance and positions, executes buys and sells
    TradingDesk: Coordinator wiring external providers into registry and ledger
    generate_history: Synthetic intraday chart anchored at the current price
"""

from .models import (
    Analysis,
    Instrument,
    NewsItem,
    NewsSource,
    Position,
    PricePoint,
    Quote,
    SyncStatus,
    TradeResult,
    normalize_symbol,
)
from .history import generate_history
from .registry import InstrumentRegistry
from .ledger import Ledger
from .seed import seed_registry
from .desk import TradingDesk

__all__ = [
    "Analysis",
    "Instrument",
    "NewsItem",
    "NewsSource",
    "Position",
    "PricePoint",
    "Quote",
    "SyncStatus",
    "TradeResult",
    "normalize_symbol",
    "generate_history",
    "InstrumentRegistry",
    "Ledger",
    "seed_registry",
    "TradingDesk",
]
