"""Seed watch-list shown before the first refresh completes."""

from decimal import Decimal

from .history import generate_history
from .models import Instrument
from .registry import InstrumentRegistry

# Each entry: (name, price, change, change %, volume, description)
SEED_QUOTES: dict[str, tuple[str, Decimal, Decimal, Decimal, str, str]] = {
    "SPY": ("S&P 500 ETF", Decimal("512.00"), Decimal("1.50"), Decimal("0.29"), "85.2M",
            "Standard & Poor's 500 Index ETF."),
    "QQQ": ("NASDAQ 100 ETF", Decimal("440.50"), Decimal("2.10"), Decimal("0.48"), "42.1M",
            "Nasdaq-100 Index Tracking Stock."),
    "DIA": ("DOW JONES ETF", Decimal("390.20"), Decimal("-0.80"), Decimal("-0.20"), "12.4M",
            "Dow Jones Industrial Average ETF."),
    "NVDA": ("NVIDIA CORP", Decimal("875.24"), Decimal("12.45"), Decimal("1.44"), "45.2M",
             "Technology company known for GPUs."),
    "BTC": ("BITCOIN USD", Decimal("69420.00"), Decimal("1200.50"), Decimal("1.76"), "28.4B",
            "Decentralized digital currency."),
}


def seed_instruments() -> list[Instrument]:
    return [
        Instrument(
            symbol=symbol,
            name=name,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=volume,
            history=generate_history(price),
            description=description,
        )
        for symbol, (name, price, change, change_percent, volume, description) in SEED_QUOTES.items()
    ]


def seed_registry() -> InstrumentRegistry:
    """Build a registry holding the seed instruments in fixed order."""
    return InstrumentRegistry(seed_instruments())
