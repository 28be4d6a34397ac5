"""Click CLI entrypoint with Rich terminal output."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sim_trader.config import Settings, get_settings
from sim_trader.domain.models import BotAnalysis, Portfolio, RiskLevel, TradeAction

console = Console()


@click.group()
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--seed", type=int, default=None, help="Seed the simulated market and noise")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, seed: int | None) -> None:
    """Sim Trader - simulated trading and market-analysis engine."""
    from sim_trader.logging import setup_logging

    settings = get_settings()
    if seed is not None:
        settings = settings.model_copy(update={"random_seed": seed})
    setup_logging(settings, cli_log_level=log_level)
    ctx.obj = settings


@cli.command()
@click.option("--symbol", "symbols", multiple=True, help="Restrict the scan to these symbols")
@click.pass_obj
def recommend(settings: Settings, symbols: tuple[str, ...]) -> None:
    """Scan the universe once and print ranked recommendations."""
    from sim_trader.trading.scheduler import TradingBot

    bot = TradingBot(settings)
    analysis = bot.engine.generate_recommendations(list(symbols) or None)
    _print_analysis(analysis)


@cli.command()
@click.option("--cycles", default=10, show_default=True, help="Number of trading cycles to run")
@click.option("--interval", default=0.0, show_default=True, help="Seconds between cycles")
@click.pass_obj
def simulate(settings: Settings, cycles: int, interval: float) -> None:
    """Run the automated trading loop over the simulated market."""
    from sim_trader.trading.scheduler import TradingBot

    console.print(
        Panel(
            "[bold green]Sim Trader[/bold green]\n"
            f"Running {cycles} cycles over the simulated market\n"
            "[dim]Simulated funds - nothing leaves this process[/dim]",
            title="Starting",
            border_style="green",
        )
    )

    bot = TradingBot(settings)
    bot.run(cycles, interval=interval)

    portfolio = bot.ledger.get_portfolio()
    _print_portfolio(portfolio)
    _print_orders(portfolio)


@cli.command()
@click.pass_obj
def config(settings: Settings) -> None:
    """Show current configuration."""
    _print_config(settings)


# ── Display helpers ─────────────────────────────────────────────


def _print_config(settings: Settings) -> None:
    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Initial Cash", f"${settings.initial_cash:,.2f}")
    table.add_row("Commission", f"{settings.commission_rate:.2%}")
    table.add_row("Universe", ", ".join(settings.tracked_symbols))
    table.add_row("Analysis Window", f"{settings.analysis_window} samples")
    table.add_row("Analysis Cache TTL", f"{settings.analysis_cache_ttl_seconds:.0f}s")
    table.add_row("Recommendation Cache TTL", f"{settings.recommendation_cache_ttl_seconds:.0f}s")
    table.add_row("Sentiment Noise", f"{settings.sentiment_noise:.3f}")
    table.add_row("Prediction Noise", f"{settings.prediction_noise:.3f}")
    table.add_row(
        "Random Seed",
        str(settings.random_seed) if settings.random_seed is not None else "[dim]unseeded[/dim]",
    )
    table.add_row("Max Position Size", f"{settings.max_position_pct:.0%}")
    table.add_row("Max Positions", str(settings.max_simultaneous_positions))
    table.add_row("Loss Limit", f"{settings.daily_loss_limit:.1%}")
    table.add_row("Log Directory", str(settings.log_dir))

    console.print(table)


def _print_analysis(analysis: BotAnalysis) -> None:
    style = {"BULLISH": "green", "BEARISH": "red"}.get(analysis.market_sentiment.value, "yellow")
    console.print(
        Panel(
            f"[bold {style}]{analysis.market_sentiment.value}[/bold {style}] "
            f"— volatility index {analysis.volatility_index:.1f}\n{analysis.summary}",
            title="Market",
            border_style=style,
        )
    )

    if not analysis.recommendations:
        console.print("[dim]No recommendations.[/dim]")
        return

    table = Table(title="Recommendations", show_header=True, header_style="bold cyan")
    table.add_column("Symbol")
    table.add_column("Action")
    table.add_column("Price", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Stop", justify="right")
    table.add_column("Potential", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Risk")

    action_styles = {TradeAction.BUY: "green", TradeAction.SELL: "red", TradeAction.HOLD: "dim"}
    risk_styles = {RiskLevel.LOW: "green", RiskLevel.MEDIUM: "yellow", RiskLevel.HIGH: "red"}
    for r in analysis.recommendations:
        table.add_row(
            r.symbol,
            Text(r.action.value, style=action_styles[r.action]),
            f"${r.current_price:,.2f}",
            f"${r.target_price:,.2f}",
            f"${r.stop_loss:,.2f}",
            f"{r.potential_profit:.1f}%",
            f"{r.confidence:.0f}%",
            Text(r.risk_level.value, style=risk_styles[r.risk_level]),
        )

    console.print(table)
    for warning in analysis.risk_warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


def _print_portfolio(portfolio: Portfolio) -> None:
    table = Table(title="Portfolio", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="dim")
    table.add_column("Value", justify="right")

    pnl_style = "green" if portfolio.total_pnl >= 0 else "red"
    table.add_row("Total Value", f"${portfolio.total_value:,.2f}")
    table.add_row("Cash", f"${portfolio.cash_balance:,.2f}")
    table.add_row(
        "Unrealized P&L",
        Text(
            f"${portfolio.total_pnl:+,.2f} ({portfolio.total_pnl_percent:+.2f}%)", style=pnl_style
        ),
    )
    table.add_row(
        "Day Change",
        f"${portfolio.day_change:+,.2f} ({portfolio.day_change_percent:+.2f}%)",
    )
    console.print(table)

    if not portfolio.positions:
        console.print("[dim]No open positions.[/dim]")
        return

    positions = Table(title="Open Positions", show_header=True, header_style="bold cyan")
    positions.add_column("Symbol")
    positions.add_column("Qty", justify="right")
    positions.add_column("Avg Price", justify="right")
    positions.add_column("Current", justify="right")
    positions.add_column("P&L", justify="right")
    positions.add_column("P&L %", justify="right")

    for p in portfolio.positions:
        style = "green" if p.unrealized_pnl >= 0 else "red"
        positions.add_row(
            p.symbol,
            str(p.quantity),
            f"${p.avg_price:,.2f}",
            f"${p.current_price:,.2f}",
            Text(f"${p.unrealized_pnl:+,.2f}", style=style),
            Text(f"{p.unrealized_pnl_percent:+.2f}%", style=style),
        )

    console.print(positions)


def _print_orders(portfolio: Portfolio) -> None:
    if not portfolio.orders:
        console.print("[dim]No orders filled.[/dim]")
        return

    table = Table(title="Order History", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Symbol")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Fill", justify="right")
    table.add_column("Commission", justify="right")
    table.add_column("Status")

    for o in portfolio.orders:
        side_style = "green" if o.side.value == "buy" else "red"
        table.add_row(
            o.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            o.symbol,
            Text(o.side.value, style=side_style),
            str(o.quantity),
            f"${o.fill_price:,.2f}",
            f"${o.commission:,.2f}",
            o.status.value,
        )

    console.print(table)
