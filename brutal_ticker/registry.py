import logging
from typing import Callable, Iterator, Mapping, Optional

from .history import generate_history
from .models import Instrument, PricePoint, Quote, normalize_symbol

logger = logging.getLogger(__name__)

HistoryFactory = Callable[[Quote], list[PricePoint]]


def _history_from_quote(quote: Quote) -> list[PricePoint]:
    return generate_history(quote.price)


class InstrumentRegistry:
    """The watch-list: one Instrument per canonical symbol, newest lookups first."""

    def __init__(
        self,
        instruments: Optional[list[Instrument]] = None,
        history_factory: HistoryFactory = _history_from_quote,
    ) -> None:
        self._instruments: list[Instrument] = []
        self._history_factory = history_factory
        for instrument in instruments or []:
            if self.find(instrument.symbol) is None:
                instrument.symbol = normalize_symbol(instrument.symbol)
                self._instruments.append(instrument)

    def add_if_absent(self, instrument: Instrument) -> Instrument:
        """Insert at the front unless the symbol is already listed.

        Returns:
            The registered Instrument: the existing one when the symbol
            (compared case-insensitively) is already present, otherwise the
            newly inserted one.
        """
        existing = self.find(instrument.symbol)
        if existing is not None:
            return existing

        instrument.symbol = normalize_symbol(instrument.symbol)
        self._instruments.insert(0, instrument)
        logger.debug("Added %s to watch-list", instrument.symbol)
        return instrument

    def find(self, query: str) -> Optional[Instrument]:
        """Case-insensitive symbol match, used before any network lookup."""
        if not query or not query.strip():
            return None
        return self.by_identifier(query.strip().upper())

    def by_identifier(self, symbol: str) -> Optional[Instrument]:
        for instrument in self._instruments:
            if instrument.symbol == symbol:
                return instrument
        return None

    def merge_quotes(self, quotes: Mapping[str, Quote]) -> list[str]:
        """Merge a refresh cycle's quotes into the listed instruments.

        Each instrument's quote is looked up by its exact symbol, then by a
        case-insensitive match of the source keys. Instruments without a
        quote are left untouched. The new history is generated before any
        field is assigned, so an instrument is either fully updated or not
        at all.

        Returns:
            Symbols whose quote was applied, in watch-list order.
        """
        folded = {key.upper(): quote for key, quote in quotes.items() if isinstance(key, str)}
        updated: list[str] = []

        for instrument in self._instruments:
            quote = quotes.get(instrument.symbol) or folded.get(instrument.symbol.upper())
            if quote is None:
                continue
            try:
                history = self._history_factory(quote)
            except (ValueError, ArithmeticError) as e:
                logger.warning("Skipping quote for %s: %s", instrument.symbol, e)
                continue
            instrument.apply_quote(quote, history)
            updated.append(instrument.symbol)

        return updated

    def symbols(self) -> list[str]:
        return [instrument.symbol for instrument in self._instruments]

    def __iter__(self) -> Iterator[Instrument]:
        return iter(list(self._instruments))

    def __len__(self) -> int:
        return len(self._instruments)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.find(symbol) is not None

    def __repr__(self) -> str:
        return f"InstrumentRegistry(symbols={self.symbols()})"
