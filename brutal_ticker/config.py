"""Configuration constants for the trading terminal."""

import os
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration for the simulated cash ledger."""

    STARTING_CASH: Decimal = Decimal("10000")


@dataclass(frozen=True)
class HistoryConfig:
    """Shape of the synthetic intraday price history."""

    SESSION_OPEN_HOUR: int = 9
    SESSION_CLOSE_HOUR: int = 16
    INTERVAL_MINUTES: int = 15
    STEP_FRACTION: float = 0.015
    OPENING_GAP_FRACTION: float = 0.02


@dataclass(frozen=True)
class DeskConfig:
    """Configuration for the trading desk coordinator."""

    REFRESH_INTERVAL_S: float = 60.0


@dataclass(frozen=True)
class HeadlineConfig:
    """Configuration for the headline scraper."""

    URL: str = "https://finance.yahoo.com/topic/latest-news/"
    HEADLINE_SELECTOR: str = "h3 a, a:has(h3)"
    REQUEST_TIMEOUT_MS: int = 30000
    MAX_HEADLINES: int = 5


def _default_region() -> str:
    return os.environ.get("AWS_DEFAULT_REGION", "us-east-1")


@dataclass(frozen=True)
class BedrockConfig:
    """Configuration for the Bedrock analysis model."""

    MODEL_ID: str = "us.amazon.nova-pro-v1:0"
    REGION: str = field(default_factory=_default_region)
    TEMPERATURE: float = 0.0


def _default_aliases() -> dict[str, str]:
    return {"BTC": "BTC-USD"}


@dataclass(frozen=True)
class YahooConfig:
    """Configuration for the Yahoo Finance quote provider."""

    # Watch-list symbol -> Yahoo ticker, where the two differ
    SYMBOL_ALIASES: dict[str, str] = field(default_factory=_default_aliases)
    SEARCH_MAX_RESULTS: int = 5
