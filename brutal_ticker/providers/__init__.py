"""External data providers.

Concrete providers live in their own modules (yahoo, bedrock, headlines)
so their third-party clients are only imported when used.
"""

from .base import AnalysisProvider, NewsProvider, QuoteProvider

__all__ = [
    "AnalysisProvider",
    "NewsProvider",
    "QuoteProvider",
]
