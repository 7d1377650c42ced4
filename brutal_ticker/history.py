"""Synthetic intraday price history for chart display."""

from decimal import Decimal
from typing import Optional

import numpy as np

from .config import HistoryConfig
from .models import PricePoint

CENT = Decimal("0.01")


def session_labels(config: Optional[HistoryConfig] = None) -> list[str]:
    """Time labels for every interior sample of a trading session."""
    config = config or HistoryConfig()
    return [
        f"{hour}:{minute:02d}"
        for hour in range(config.SESSION_OPEN_HOUR, config.SESSION_CLOSE_HOUR)
        for minute in range(0, 60, config.INTERVAL_MINUTES)
    ]


def generate_history(
    anchor_price: Decimal,
    config: Optional[HistoryConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> list[PricePoint]:
    """Generate a random-walk session that ends exactly at the anchor price.

    The walk opens within the configured gap of the anchor and moves by at
    most half of STEP_FRACTION * anchor per sample, so the noise stays
    proportional to the instrument's price level.

    Args:
        anchor_price: Authoritative current price; becomes the final sample.
        config: Session shape. Defaults to HistoryConfig().
        rng: Random generator, for reproducible charts in tests.

    Returns:
        List of PricePoint objects, oldest first.
    """
    if anchor_price < 0:
        raise ValueError(f"Anchor price must be non-negative, got {anchor_price}")

    config = config or HistoryConfig()
    rng = rng or np.random.default_rng()
    labels = session_labels(config)

    base = float(anchor_price)
    opening = base * (1 + rng.uniform(-config.OPENING_GAP_FRACTION, config.OPENING_GAP_FRACTION))
    steps = (rng.random(len(labels)) - 0.5) * (base * config.STEP_FRACTION)
    walk = np.maximum(opening + np.cumsum(steps), 0.0)

    history = [
        PricePoint(time=label, price=Decimal(str(round(float(price), 2))).quantize(CENT))
        for label, price in zip(labels, walk)
    ]
    history.append(PricePoint(time=f"{config.SESSION_CLOSE_HOUR}:00", price=anchor_price))
    return history
