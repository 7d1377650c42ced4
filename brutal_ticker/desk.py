import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .config import DeskConfig
from .history import generate_history
from .ledger import Ledger
from .models import Analysis, Instrument, NewsItem, Quote, SyncStatus, TradeResult
from .providers.base import AnalysisProvider, NewsProvider, QuoteProvider
from .registry import InstrumentRegistry
from .seed import seed_registry

logger = logging.getLogger(__name__)

OFFLINE_ANALYSIS = Analysis(
    summary="API KEY MISSING. UNABLE TO ANALYZE. SYSTEM OFFLINE.",
    sentiment="NEUTRAL",
)
OFFLINE_NEWS = NewsItem(text="SYSTEM OFFLINE. CONNECT API KEY.", sources=[])


class TradingDesk:
    """Owns the watch-list and the ledger and feeds provider results into them.

    All mutation happens on the event loop thread. Each fetch has an
    in-flight guard: a second request for the same purpose while one is
    outstanding is ignored rather than queued.
    """

    def __init__(
        self,
        registry: Optional[InstrumentRegistry] = None,
        ledger: Optional[Ledger] = None,
        quotes: Optional[QuoteProvider] = None,
        analyst: Optional[AnalysisProvider] = None,
        news: Optional[NewsProvider] = None,
        config: Optional[DeskConfig] = None,
    ) -> None:
        self.registry = registry if registry is not None else seed_registry()
        self.ledger = ledger if ledger is not None else Ledger()
        self.config = config or DeskConfig()
        self._quotes = quotes
        self._analyst = analyst
        self._news = news
        self._in_flight: set[str] = set()
        self.status = SyncStatus.INITIALIZING
        self.last_updated: Optional[datetime] = None

    def is_busy(self, purpose: str) -> bool:
        return purpose in self._in_flight

    async def refresh_quotes(self) -> SyncStatus:
        """Fetch quotes for the whole watch-list and merge them.

        Returns:
            UPDATED or FAILED for a completed refresh, SYNCING if another
            refresh was already in flight and this call did nothing.
        """
        if self.is_busy("quotes"):
            logger.debug("Quote refresh already in flight, ignoring request")
            return SyncStatus.SYNCING

        self._in_flight.add("quotes")
        self.status = SyncStatus.SYNCING
        try:
            quotes = await self._fetch_quotes()
            if quotes is None:
                self.status = SyncStatus.FAILED
                return self.status

            updated = self.registry.merge_quotes(quotes)
            self.ledger.mark(self.prices())
            self.last_updated = datetime.now()
            self.status = SyncStatus.UPDATED
            logger.info("Refreshed %d of %d instruments", len(updated), len(self.registry))
            return self.status
        finally:
            self._in_flight.discard("quotes")

    async def _fetch_quotes(self) -> Optional[dict[str, Quote]]:
        if self._quotes is None:
            return None
        try:
            return await self._quotes.fetch_quotes(self.registry.symbols())
        except Exception as e:
            logger.warning("Quote refresh failed: %s", e)
            return None

    async def auto_refresh(self, interval: Optional[float] = None) -> None:
        """Refresh now and then every `interval` seconds until cancelled."""
        interval = self.config.REFRESH_INTERVAL_S if interval is None else interval
        while True:
            await self.refresh_quotes()
            await asyncio.sleep(interval)

    async def search(self, query: str) -> Optional[Instrument]:
        """Find an instrument on the watch-list, or look it up and add it.

        Returns:
            The listed Instrument, or None if the query is blank, a lookup
            is already running, or the provider found nothing.
        """
        if not query or not query.strip():
            return None

        existing = self.registry.find(query)
        if existing is not None:
            return existing

        if self._quotes is None or self.is_busy("lookup"):
            return None

        self._in_flight.add("lookup")
        try:
            found = await self._quotes.lookup(query.strip())
        except Exception as e:
            logger.warning("Lookup failed for %r: %s", query, e)
            found = None
        finally:
            self._in_flight.discard("lookup")

        if found is None:
            return None
        found.history = generate_history(found.price)
        return self.registry.add_if_absent(found)

    async def analyze(self, symbol: str) -> Analysis:
        instrument = self.registry.find(symbol)
        if instrument is None:
            raise ValueError(f"Unknown symbol: {symbol}")
        if self._analyst is None:
            return OFFLINE_ANALYSIS
        return await self._analyst.analyze(instrument)

    async def market_news(self) -> NewsItem:
        if self._news is None:
            return OFFLINE_NEWS
        return await self._news.fetch_news()

    def buy(self, symbol: str, quantity: int) -> TradeResult:
        """Buy at the watch-list's current price."""
        instrument = self.registry.find(symbol)
        if instrument is None:
            return TradeResult("BUY", symbol, quantity, Decimal("0"), accepted=False, reason="unknown symbol")
        return self.ledger.buy(instrument.symbol, quantity, instrument.price)

    def sell(self, symbol: str, quantity: int) -> TradeResult:
        """Sell at the watch-list's current price."""
        instrument = self.registry.find(symbol)
        if instrument is None:
            return TradeResult("SELL", symbol, quantity, Decimal("0"), accepted=False, reason="unknown symbol")
        return self.ledger.sell(instrument.symbol, quantity, instrument.price)

    def prices(self) -> dict[str, Decimal]:
        return {instrument.symbol: instrument.price for instrument in self.registry}

    def equity_value(self) -> Decimal:
        return self.ledger.equity_value(self.prices())

    def net_liquidation_value(self) -> Decimal:
        return self.ledger.net_liquidation_value(self.prices())

    async def close(self) -> None:
        for provider in (self._quotes, self._analyst, self._news):
            if provider is not None:
                await provider.close()
