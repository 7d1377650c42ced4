#!/usr/bin/env python3
import asyncio
import logging
import shlex
from decimal import Decimal
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from brutal_ticker import Instrument, SyncStatus, TradingDesk

logger = logging.getLogger(__name__)
console = Console()

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"
SENTIMENT_STYLES: dict[str, str] = {
    "BULLISH": "bold green",
    "BEARISH": "bold red",
    "NEUTRAL": "bold yellow",
}
HELP_TEXT = (
    "[bold]refresh[/bold] · [bold]buy[/bold] SYM QTY · [bold]sell[/bold] SYM QTY · "
    "[bold]search[/bold] QUERY · [bold]show[/bold] SYM · [bold]analyze[/bold] SYM · "
    "[bold]news[/bold] · [bold]portfolio[/bold] · [bold]quit[/bold]"
)


def build_desk() -> TradingDesk:
    """Wire the live providers; any that cannot start leave the desk offline for that feed."""
    from brutal_ticker.providers.headlines import HeadlineScraper
    from brutal_ticker.providers.yahoo import YahooQuoteProvider

    analyst = None
    try:
        from brutal_ticker.providers.bedrock import BedrockAnalyst

        analyst = BedrockAnalyst()
    except Exception as e:
        logger.warning("Analysis offline: %s", e)

    return TradingDesk(quotes=YahooQuoteProvider(), analyst=analyst, news=HeadlineScraper())


def _change_style(change: Decimal) -> str:
    return "green" if change >= 0 else "red"


def sparkline(instrument: Instrument) -> str:
    """Render the instrument's history as a one-line block chart."""
    prices = [point.price for point in instrument.history]
    if not prices:
        return ""
    low, high = min(prices), max(prices)
    span = high - low
    if span == 0:
        return SPARK_BLOCKS[0] * len(prices)
    top = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[int((p - low) * top / span)] for p in prices)


def status_line(desk: TradingDesk) -> str:
    if desk.status is SyncStatus.SYNCING:
        return "[bold orange3]// SYNCING...[/bold orange3]"
    if desk.status is SyncStatus.UPDATED and desk.last_updated:
        return f"[dim]// UPDATED: {desk.last_updated:%H:%M:%S}[/dim]"
    return f"[dim]// UPDATED: {desk.status.value}[/dim]"


def watchlist_table(desk: TradingDesk) -> Table:
    """Build a Rich table showing every instrument on the watch-list."""
    t = Table(title="Watch-list", box=box.ROUNDED, title_style="bold white")
    t.add_column("Symbol", style="cyan")
    t.add_column("Name", style="dim")
    t.add_column("Price", justify="right")
    t.add_column("Change", justify="right")
    t.add_column("%", justify="right")
    t.add_column("Volume", justify="right")
    t.add_column("Owned", justify="right", style="yellow")

    for inst in desk.registry:
        style = _change_style(inst.change)
        owned = desk.ledger.owned_quantity(inst.symbol)
        t.add_row(
            inst.symbol,
            inst.name,
            f"${inst.price:,.2f}",
            Text(f"{inst.change:+,.2f}", style=style),
            Text(f"{inst.change_percent:+.2f}%", style=style),
            inst.volume,
            str(owned) if owned else "",
        )
    return t


def portfolio_table(desk: TradingDesk) -> Table:
    """Build a Rich table showing open positions and unrealized P/L."""
    t = Table(title="Portfolio", box=box.ROUNDED, title_style="bold white")
    t.add_column("Symbol", style="cyan")
    t.add_column("Qty", justify="right")
    t.add_column("Avg", justify="right")
    t.add_column("Price", justify="right")
    t.add_column("Value", justify="right")
    t.add_column("P/L", justify="right")
    t.add_column("P/L %", justify="right")

    prices = desk.prices()
    ledger = desk.ledger
    for symbol, pos in ledger.positions.items():
        price = prices.get(symbol, pos.last_price)
        pl = ledger.unrealized_pl(symbol, price)
        pct = ledger.pl_percent(symbol, price)
        style = _change_style(pl)
        t.add_row(
            symbol,
            str(pos.quantity),
            f"${pos.average_entry_price:,.2f}",
            f"${price:,.2f}",
            f"${ledger.market_value(symbol, price):,.2f}",
            Text(f"{pl:+,.2f}", style=style),
            Text(f"{pct:+.1f}%" if pct is not None else "-", style=style),
        )

    if not ledger.positions:
        t.add_row("[dim]NO POSITIONS DETECTED. DEPLOY CAPITAL.[/dim]", "", "", "", "", "", "")

    t.add_section()
    t.add_row("", "", "", "Cash", f"${ledger.cash:,.2f}", "", "")
    t.add_row("", "", "", "Equity", f"${desk.equity_value():,.2f}", "", "")
    t.add_row("", "", "", "Total", f"[bold]${desk.net_liquidation_value():,.2f}[/bold]", "", "")
    return t


def detail_panel(desk: TradingDesk, inst: Instrument) -> Panel:
    style = _change_style(inst.change)
    body = (
        f"[bold]{inst.name}[/bold]  {inst.description or ''}\n"
        f"${inst.price:,.2f}  [{style}]{inst.change:+,.2f} ({inst.change_percent:+.2f}%)[/{style}]"
        f"  VOL {inst.volume}\n"
        f"{sparkline(inst)}\n"
        f"[dim]OWNED: {desk.ledger.owned_quantity(inst.symbol)}  "
        f"CASH: ${desk.ledger.cash:,.2f}[/dim]"
    )
    return Panel(body, title=inst.symbol, box=box.HEAVY)


def _parse_trade(args: list[str]) -> Optional[tuple[str, int]]:
    if len(args) != 2:
        return None
    try:
        return args[0], int(args[1])
    except ValueError:
        return None


async def handle_command(desk: TradingDesk, line: str) -> bool:
    """Run one command line. Returns False when the session should end."""
    try:
        parts = shlex.split(line)
    except ValueError:
        parts = line.split()
    if not parts:
        return True

    command, args = parts[0].lower(), parts[1:]

    if command in ("quit", "exit", "q"):
        return False

    if command == "refresh":
        with console.status("[bold]Syncing quotes...[/bold]"):
            status = await desk.refresh_quotes()
        if status is SyncStatus.SYNCING:
            console.print("[yellow]  Refresh already in progress.[/yellow]")
        console.print(watchlist_table(desk))

    elif command in ("buy", "sell"):
        trade = _parse_trade(args)
        if trade is None:
            console.print(f"[red]  Usage: {command} SYM QTY[/red]")
            return True
        symbol, quantity = trade
        result = desk.buy(symbol, quantity) if command == "buy" else desk.sell(symbol, quantity)
        console.print(f"  [{'green' if result.accepted else 'red'}]{result}[/]")

    elif command == "search":
        query = " ".join(args)
        if desk.registry.find(query) is None and desk.is_busy("lookup"):
            console.print("[yellow]  Lookup already in progress.[/yellow]")
            return True
        with console.status(f"[bold]Looking up {query}...[/bold]"):
            found = await desk.search(query)
        if found is None:
            console.print("[red]  TICKER NOT FOUND OR DATA UNAVAILABLE[/red]")
        else:
            console.print(detail_panel(desk, found))

    elif command == "show" and args:
        inst = desk.registry.find(args[0])
        if inst is None:
            console.print(f"[red]  {args[0]} is not on the watch-list.[/red]")
        else:
            console.print(detail_panel(desk, inst))

    elif command == "analyze" and args:
        if desk.registry.find(args[0]) is None:
            console.print(f"[red]  {args[0]} is not on the watch-list.[/red]")
            return True
        with console.status("[bold]Analyzing...[/bold]"):
            analysis = await desk.analyze(args[0])
        console.print(
            Panel(
                analysis.summary,
                title=Text(analysis.sentiment, style=SENTIMENT_STYLES[analysis.sentiment]),
                box=box.HEAVY,
            )
        )

    elif command == "news":
        with console.status("[bold]Retrieving intel...[/bold]"):
            news = await desk.market_news()
        console.print(Panel(news.text, title="Market News", box=box.HEAVY))
        for source in news.sources:
            console.print(f"  [dim]{source.title}[/dim] [link={source.uri}]{source.uri}[/link]")

    elif command == "portfolio":
        console.print(portfolio_table(desk))

    else:
        console.print(f"  {HELP_TEXT}")

    return True


async def run_cli_loop(desk: TradingDesk) -> None:
    refresher = asyncio.create_task(desk.auto_refresh())
    try:
        while True:
            console.print()
            console.print(f"  LIQUID: [bold]${desk.ledger.cash:,.2f}[/bold]  {status_line(desk)}")
            line = await asyncio.to_thread(Prompt.ask, "  [bold cyan]>[/bold cyan]", default="")
            if not await handle_command(desk, line):
                break
    finally:
        refresher.cancel()
        try:
            await refresher
        except asyncio.CancelledError:
            pass
        await desk.close()


def main() -> None:
    """Entry point for the CLI application."""
    console.print()
    console.print(Panel("[bold]BRUTAL.TICKER[/bold] · simulated trading terminal", box=box.DOUBLE))
    console.print(f"  {HELP_TEXT}")

    desk = build_desk()
    console.print(watchlist_table(desk))

    try:
        asyncio.run(run_cli_loop(desk))
    except KeyboardInterrupt:
        console.print()


if __name__ == "__main__":
    main()
