import logging
from decimal import Decimal
from typing import Mapping, Optional

from .config import LedgerConfig
from .models import Action, Position, TradeResult, normalize_symbol

logger = logging.getLogger(__name__)


class Ledger:
    """A single cash balance and a set of weighted-average-cost positions.

    Every trade is evaluated and applied (or rejected) in one step. Cash
    never goes negative: a buy is only applied when the whole order is
    affordable, and a sell only when enough shares are held.
    """

    def __init__(self, cash: Optional[Decimal] = None) -> None:
        cash = LedgerConfig().STARTING_CASH if cash is None else Decimal(str(cash))
        if cash < 0:
            raise ValueError(f"Starting cash must be non-negative, got {cash}")
        self.cash: Decimal = cash
        self.positions: dict[str, Position] = {}

    def buy(self, symbol: str, quantity: int, unit_price: Decimal) -> TradeResult:
        symbol = normalize_symbol(symbol)
        unit_price = self._check_price(unit_price)
        if quantity <= 0:
            return self._reject("BUY", symbol, quantity, unit_price, "quantity must be positive")

        cost = Decimal(quantity) * unit_price
        if cost > self.cash:
            return self._reject("BUY", symbol, quantity, unit_price, "insufficient cash")

        self.cash -= cost
        position = self.positions.get(symbol)
        if position is None:
            self.positions[symbol] = Position(
                symbol=symbol,
                quantity=quantity,
                average_entry_price=unit_price,
                last_price=unit_price,
            )
        else:
            total_qty = position.quantity + quantity
            position.average_entry_price = (position.cost_basis + cost) / Decimal(total_qty)
            position.quantity = total_qty
            position.last_price = unit_price

        return TradeResult("BUY", symbol, quantity, unit_price, accepted=True)

    def sell(self, symbol: str, quantity: int, unit_price: Decimal) -> TradeResult:
        symbol = normalize_symbol(symbol)
        unit_price = self._check_price(unit_price)
        if quantity <= 0:
            return self._reject("SELL", symbol, quantity, unit_price, "quantity must be positive")

        position = self.positions.get(symbol)
        if position is None:
            return self._reject("SELL", symbol, quantity, unit_price, "no position")
        if quantity > position.quantity:
            return self._reject("SELL", symbol, quantity, unit_price, "insufficient quantity")

        self.cash += Decimal(quantity) * unit_price
        if quantity == position.quantity:
            del self.positions[symbol]
        else:
            # Average cost of the remainder is unchanged by a sell.
            position.quantity -= quantity
            position.last_price = unit_price

        return TradeResult("SELL", symbol, quantity, unit_price, accepted=True)

    def mark(self, prices: Mapping[str, Decimal]) -> None:
        """Record current prices as each position's last known price."""
        prices = _canonical(prices)
        for symbol, position in self.positions.items():
            if symbol in prices:
                position.last_price = prices[symbol]

    def position(self, symbol: str) -> Optional[Position]:
        return self.positions.get(normalize_symbol(symbol))

    def owned_quantity(self, symbol: str) -> int:
        position = self.position(symbol)
        return position.quantity if position else 0

    def cost_basis(self, symbol: str) -> Decimal:
        position = self.position(symbol)
        return position.cost_basis if position else Decimal("0")

    def market_value(self, symbol: str, current_price: Decimal) -> Decimal:
        return Decimal(self.owned_quantity(symbol)) * current_price

    def unrealized_pl(self, symbol: str, current_price: Decimal) -> Decimal:
        return self.market_value(symbol, current_price) - self.cost_basis(symbol)

    def pl_percent(self, symbol: str, current_price: Decimal) -> Optional[Decimal]:
        """Unrealized P/L as a percentage of cost basis, None when the basis is 0."""
        basis = self.cost_basis(symbol)
        if basis == 0:
            return None
        return self.unrealized_pl(symbol, current_price) / basis * Decimal("100")

    def equity_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Market value of all positions.

        A position without a current price is valued at its last known
        price (its last fill or last mark).
        """
        prices = _canonical(prices)
        return sum(
            (
                self.market_value(symbol, prices.get(symbol, position.last_price))
                for symbol, position in self.positions.items()
            ),
            start=Decimal("0"),
        )

    def net_liquidation_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        return self.cash + self.equity_value(prices)

    def _check_price(self, unit_price: Decimal) -> Decimal:
        unit_price = Decimal(str(unit_price))
        if unit_price < 0:
            raise ValueError(f"Unit price must be non-negative, got {unit_price}")
        return unit_price

    def _reject(
        self, action: Action, symbol: str, quantity: int, unit_price: Decimal, reason: str
    ) -> TradeResult:
        logger.info("Rejected %s %s x%s: %s", action, symbol, quantity, reason)
        return TradeResult(action, symbol, quantity, unit_price, accepted=False, reason=reason)

    def __repr__(self) -> str:
        return f"Ledger(cash={self.cash}, positions={list(self.positions.keys())})"


def _canonical(prices: Mapping[str, Decimal]) -> dict[str, Decimal]:
    return {normalize_symbol(symbol): price for symbol, price in prices.items()}
