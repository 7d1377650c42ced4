"""Quote provider backed by Yahoo Finance via yfinance."""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import yfinance as yf

from ..config import YahooConfig
from ..models import Instrument, Quote, normalize_symbol
from .base import QuoteProvider

logger = logging.getLogger(__name__)

VOLUME_SUFFIXES = ((Decimal("1e12"), "T"), (Decimal("1e9"), "B"), (Decimal("1e6"), "M"), (Decimal("1e3"), "K"))
MAX_DESCRIPTION_WORDS = 10


def format_volume(volume: Any) -> Optional[str]:
    """Format a raw share count as a short display string like '85.2M'."""
    amount = _to_decimal(volume)
    if amount is None or amount < 0:
        return None
    for threshold, suffix in VOLUME_SUFFIXES:
        if amount >= threshold:
            return f"{amount / threshold:.1f}{suffix}"
    return str(int(amount))


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def build_quote(last_price: Any, previous_close: Any, volume: Any = None) -> Optional[Quote]:
    """Build a Quote from raw provider numbers, or None if they are unusable."""
    price = _to_decimal(last_price)
    if price is None or price < 0:
        return None

    previous = _to_decimal(previous_close)
    if previous is None or previous == 0:
        change = Decimal("0")
        change_percent = Decimal("0")
    else:
        change = price - previous
        change_percent = change / previous * Decimal("100")

    cent = Decimal("0.01")
    return Quote(
        price=price.quantize(cent),
        change=change.quantize(cent),
        change_percent=change_percent.quantize(cent),
        volume=format_volume(volume),
    )


class YahooQuoteProvider(QuoteProvider):
    """Fetches quotes and instrument metadata from Yahoo Finance."""

    def __init__(self, config: Optional[YahooConfig] = None) -> None:
        self.config = config or YahooConfig()
        self._canonical = {ticker: symbol for symbol, ticker in self.config.SYMBOL_ALIASES.items()}

    def _ticker_for(self, symbol: str) -> str:
        return self.config.SYMBOL_ALIASES.get(symbol, symbol)

    def _symbol_for(self, ticker: str) -> str:
        ticker = normalize_symbol(ticker)
        return self._canonical.get(ticker, ticker)

    async def fetch_quotes(self, symbols: list[str]) -> Optional[dict[str, Quote]]:
        if not symbols:
            return {}
        try:
            return await asyncio.to_thread(self._fetch_quotes_sync, symbols)
        except Exception as e:
            logger.warning("Failed to fetch quotes for %s: %s", ", ".join(symbols), e)
            return None

    def _fetch_quotes_sync(self, symbols: list[str]) -> dict[str, Quote]:
        tickers = yf.Tickers(" ".join(self._ticker_for(symbol) for symbol in symbols))
        quotes: dict[str, Quote] = {}

        for symbol in symbols:
            ticker = tickers.tickers.get(self._ticker_for(symbol))
            if ticker is None:
                continue
            try:
                info = ticker.fast_info
                quote = build_quote(
                    getattr(info, "last_price", None),
                    getattr(info, "previous_close", None),
                    getattr(info, "last_volume", None),
                )
            except Exception as e:
                logger.warning("No quote for %s: %s", symbol, e)
                continue
            if quote is not None:
                quotes[symbol] = quote

        if not quotes:
            raise ValueError("no usable quotes in response")
        return quotes

    async def lookup(self, query: str) -> Optional[Instrument]:
        try:
            return await asyncio.to_thread(self._lookup_sync, query)
        except Exception as e:
            logger.warning("Lookup failed for %r: %s", query, e)
            return None

    def _resolve_ticker(self, query: str) -> str:
        """Turn a company name or ticker into a Yahoo ticker.

        Uses Yahoo's search for the best match and falls back to treating
        the query itself as a ticker.
        """
        try:
            results = yf.Search(query, max_results=self.config.SEARCH_MAX_RESULTS, news_count=0).quotes
        except Exception as e:
            logger.warning("Symbol search failed for %r: %s", query, e)
            results = []

        for result in results or []:
            if isinstance(result, dict) and result.get("symbol"):
                return normalize_symbol(result["symbol"])
        return self._ticker_for(normalize_symbol(query))

    def _lookup_sync(self, query: str) -> Optional[Instrument]:
        ticker = self._resolve_ticker(query)
        info = yf.Ticker(ticker).info or {}

        quote = build_quote(
            info.get("regularMarketPrice") or info.get("currentPrice"),
            info.get("regularMarketPreviousClose") or info.get("previousClose"),
            info.get("regularMarketVolume") or info.get("volume"),
        )
        if quote is None or quote.price == 0:
            return None

        name = info.get("shortName") or info.get("longName") or ticker
        return Instrument(
            symbol=self._symbol_for(info.get("symbol") or ticker),
            name=str(name).upper(),
            price=quote.price,
            change=quote.change,
            change_percent=quote.change_percent,
            volume=quote.volume or "",
            description=_short_description(info.get("longBusinessSummary")),
        )


def _short_description(summary: Any) -> Optional[str]:
    if not summary:
        return None
    words = str(summary).split()
    text = " ".join(words[:MAX_DESCRIPTION_WORDS])
    return text if len(words) <= MAX_DESCRIPTION_WORDS else f"{text}..."
