"""CLI entry point for the trading journal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import click

from .core.clock import IClock, WallClock
from .core.config import Settings, load_settings
from .core.enums import Bias, GroupKey, ImportMode, TimeWindow, TradeType
from .core.errors import TradeNotFoundError, TradePulseError
from .journal.backup import backup_filename, dump_backup, dump_csv, read_import
from .journal.book import TradeBook
from .journal.calendar import daily_stats, month_total, shift_month
from .journal.metrics import (
    GroupStat,
    combination_stats,
    dashboard_stats,
    equity_curve,
    grouped_stats,
)
from .journal.record import TradeRecord
from .journal.windows import filter_trades
from .observability.logger import setup_logging
from .storage.json_store import JsonFileStore

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"]


@dataclass
class AppContext:
    settings: Settings
    clock: IClock

    def open_book(self) -> TradeBook:
        try:
            return TradeBook.load(JsonFileStore(self.settings.storage.data_file))
        except TradePulseError as exc:
            raise click.ClickException(str(exc)) from exc


def _window_options(fn):
    fn = click.option(
        "--since",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Custom window start (YYYY-MM-DD); implies --window custom",
    )(fn)
    fn = click.option(
        "--window",
        type=click.Choice([w.value for w in TimeWindow]),
        default=TimeWindow.ALL.value,
        show_default=True,
        help="Time window on exit date",
    )(fn)
    return fn


def _windowed(app: AppContext, book: TradeBook, window: str, since: datetime | None) -> list[TradeRecord]:
    selected = TimeWindow.CUSTOM if since is not None else TimeWindow(window)
    return filter_trades(
        book.trades,
        selected,
        app.clock.now(),
        since.date() if since is not None else None,
    )


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _print_groups(title: str, groups: list[GroupStat]) -> None:
    click.echo(f"\n{title}")
    click.echo(f"{'-' * 70}")
    if not groups:
        click.echo("  (no data)")
        return
    click.echo(f"  {'Label':32s} {'Trades':>6s} {'W':>4s} {'L':>4s} {'WR %':>6s} {'P&L':>12s}")
    for g in groups:
        click.echo(
            f"  {g.label[:32]:32s} {g.count:6d} {g.wins:4d} {g.losses:4d} "
            f"{g.win_rate:6.1f} {_money(g.pnl):>12s}"
        )


@click.group()
@click.option("--config", default="tradepulse.toml", help="Config file path")
@click.option("--data-file", default=None, help="Trade data file override")
@click.pass_context
def main(ctx: click.Context, config: str, data_file: str | None) -> None:
    """TradePulse trading journal."""
    overrides: dict = {}
    if data_file:
        overrides["storage"] = {"data_file": data_file}
    try:
        settings = load_settings(config, overrides)
    except TradePulseError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    preset = ctx.obj if isinstance(ctx.obj, dict) else {}
    ctx.obj = AppContext(
        settings=settings,
        clock=preset.get("clock") or WallClock(settings.analytics.tzinfo),
    )


# ---------------------------------------------------------------------- #
# Journal entries                                                          #
# ---------------------------------------------------------------------- #

@main.command()
@click.option("--ticker", required=True, help="Instrument symbol")
@click.option("--type", "trade_type", type=click.Choice(["long", "short"]), default="long")
@click.option("--bias", type=click.Choice(["bullish", "bearish"]), default=None)
@click.option("--entry-date", type=click.DateTime(formats=_DATE_FORMATS), default=None)
@click.option("--exit-date", type=click.DateTime(formats=_DATE_FORMATS), default=None)
@click.option("--entry-price", type=float, default=None, help="Detailed mode")
@click.option("--exit-price", type=float, default=None, help="Detailed mode")
@click.option("--stop-loss", type=float, default=None, help="Detailed mode")
@click.option("--quantity", type=float, default=0.0)
@click.option("--fees", type=float, default=0.0)
@click.option("--net-pnl", type=float, default=None, help="Quick mode: net P&L")
@click.option("--risk", type=float, default=None, help="Quick mode: dollar risk")
@click.option("--setup", default="")
@click.option("--poi", default="")
@click.option("--target", default="")
@click.option("--notes", default="")
@click.pass_obj
def add(app: AppContext, ticker: str, trade_type: str, bias: str | None,
        entry_date: datetime | None, exit_date: datetime | None,
        entry_price: float | None, exit_price: float | None, stop_loss: float | None,
        quantity: float, fees: float, net_pnl: float | None, risk: float | None,
        setup: str, poi: str, target: str, notes: str) -> None:
    """Log a trade (detailed with prices, or quick with --net-pnl)."""
    now = app.clock.now()
    common = dict(
        ticker=ticker,
        entry_date=entry_date or now,
        exit_date=exit_date or entry_date or now,
        type=TradeType(trade_type.capitalize()),
        bias=Bias(bias.capitalize()) if bias else None,
        quantity=quantity,
        fees=fees,
        setup=setup,
        poi=poi,
        target=target,
        notes=notes,
    )
    try:
        if net_pnl is not None:
            trade = TradeRecord.from_net_pnl(net_pnl=net_pnl, risk_amount=risk, **common)
        else:
            if entry_price is None or exit_price is None:
                raise click.UsageError(
                    "Detailed mode needs --entry-price and --exit-price "
                    "(or use --net-pnl for quick mode)"
                )
            trade = TradeRecord.from_prices(
                entry_price=entry_price, exit_price=exit_price,
                stop_loss=stop_loss, **common,
            )
        app.open_book().add(trade)
    except (TradePulseError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    r = f"  R={trade.r_multiple:+.2f}" if trade.r_multiple is not None else ""
    click.echo(f"Logged {trade.ticker} {trade.type.value}: {_money(trade.pnl)} ({trade.status.value}){r}")
    click.echo(f"  id: {trade.id}")


@main.command()
@click.argument("trade_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete(app: AppContext, trade_id: str, yes: bool) -> None:
    """Delete a trade by id."""
    book = app.open_book()
    if not yes:
        click.confirm("Are you sure you want to delete this trade?", abort=True)
    try:
        trade = book.delete(trade_id)
    except TradeNotFoundError as exc:
        raise click.ClickException(f"No trade with id {trade_id}") from exc
    except TradePulseError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted {trade.ticker} ({trade.id})")


@main.command("list")
@click.option("--limit", default=20, type=int, help="Number of trades to show")
@click.pass_obj
def list_trades(app: AppContext, limit: int) -> None:
    """Show the most recent trades."""
    trades = app.open_book().recent(limit)
    if not trades:
        click.echo("No trades logged yet.")
        return
    click.echo(f"  {'Exit':10s} {'Ticker':8s} {'Type':5s} {'Setup':18s} {'P&L':>12s} {'%':>8s} {'R':>6s}  Id")
    for t in trades:
        pct = f"{t.return_pct:.2f}%" if t.return_pct is not None else "-"
        r = f"{t.r_multiple:.2f}" if t.r_multiple is not None else "-"
        click.echo(
            f"  {t.exit_date.date().isoformat():10s} {t.ticker[:8]:8s} {t.type.value:5s} "
            f"{t.setup[:18]:18s} {_money(t.pnl):>12s} {pct:>8s} {r:>6s}  {t.id}"
        )


# ---------------------------------------------------------------------- #
# Analytics                                                                #
# ---------------------------------------------------------------------- #

@main.command()
@_window_options
@click.pass_obj
def stats(app: AppContext, window: str, since: datetime | None) -> None:
    """Dashboard statistics."""
    s = dashboard_stats(_windowed(app, app.open_book(), window, since))
    click.echo(f"\n{'=' * 40}")
    click.echo("PERFORMANCE OVERVIEW")
    click.echo(f"{'=' * 40}")
    click.echo(f"  Total trades:    {s.total_trades}")
    click.echo(f"  Win rate:        {s.win_rate:.1f}%")
    click.echo(f"  Net P&L:         {_money(s.total_pnl)}")
    click.echo(f"  Profit factor:   {s.profit_factor:.2f}")
    click.echo(f"  Avg win:         {_money(s.avg_win)}")
    click.echo(f"  Avg loss:        {_money(s.avg_loss)}")
    click.echo(f"  Best trade:      {_money(s.best_trade)}")
    click.echo(f"  Worst trade:     {_money(s.worst_trade)}")
    click.echo(f"  Win streak:      {s.consecutive_wins}")
    click.echo(f"  Loss streak:     {s.consecutive_losses}")


@main.command()
@click.option(
    "--by",
    "dimension",
    type=click.Choice([k.value for k in GroupKey] + ["combo"]),
    default=GroupKey.SETUP.value,
    show_default=True,
)
@click.option("--top", default=None, type=int, help="Rows to show")
@_window_options
@click.pass_obj
def breakdown(app: AppContext, dimension: str, top: int | None, window: str, since: datetime | None) -> None:
    """Grouped statistics by one classification dimension."""
    trades = _windowed(app, app.open_book(), window, since)
    analytics = app.settings.analytics
    if dimension == "combo":
        groups = combination_stats(
            trades,
            min_count=analytics.combination_min_count,
            top_n=top or analytics.combination_top_n,
        )
        title = "TOP COMBINATIONS"
    else:
        groups = grouped_stats(trades, GroupKey(dimension))[: top or analytics.breakdown_top_n]
        title = f"BY {dimension.upper()}"
    _print_groups(title, groups)


@main.command()
@_window_options
@click.pass_obj
def equity(app: AppContext, window: str, since: datetime | None) -> None:
    """Equity curve, one row per trade."""
    points = equity_curve(_windowed(app, app.open_book(), window, since))
    if not points:
        click.echo("No trades in window.")
        return
    for p in points:
        click.echo(f"  {p.date.isoformat():25s} {_money(p.trade_pnl):>12s} {_money(p.cumulative_equity):>14s}")


@main.command()
@click.option("--month", default=None, help="YYYY-MM (default: current month)")
@click.option("--offset", default=0, type=int, help="Months relative to --month")
@click.pass_obj
def calendar(app: AppContext, month: str | None, offset: int) -> None:
    """Day-by-day P&L for a month."""
    if month:
        try:
            parsed = datetime.strptime(month, "%Y-%m")
        except ValueError as exc:
            raise click.BadParameter("expected YYYY-MM", param_hint="--month") from exc
        year, mon = parsed.year, parsed.month
    else:
        now = app.clock.now()
        year, mon = now.year, now.month
    year, mon = shift_month(year, mon, offset)

    days = daily_stats(app.open_book().trades, year, mon, tz=app.settings.analytics.tzinfo)
    click.echo(f"\n{datetime(year, mon, 1):%B %Y}")
    if not days:
        click.echo("  No trades this month.")
        return
    for day in sorted(days):
        bucket = days[day]
        click.echo(f"  {day:2d}  {_money(bucket.pnl):>12s}  ({bucket.count} trade{'s' if bucket.count != 1 else ''})")
    total = month_total(days)
    click.echo(f"  Month: {_money(total.pnl)} over {total.count} trades")


# ---------------------------------------------------------------------- #
# Data management                                                          #
# ---------------------------------------------------------------------- #

@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def import_file(app: AppContext, path: Path, yes: bool) -> None:
    """Import a CSV export (append) or a JSON backup (replace)."""
    try:
        text = path.read_text(encoding="utf-8-sig")
        result = read_import(path.name, text, clock=app.clock)
    except (OSError, UnicodeDecodeError) as exc:
        raise click.ClickException(f"Error reading file: {exc}") from exc
    except TradePulseError as exc:
        raise click.ClickException(str(exc)) from exc

    count = len(result.trades)
    if result.mode == ImportMode.APPEND:
        prompt = f"Parsed {count} trades. Add them to your current journal?"
    else:
        prompt = f"Found {count} trades in backup. This will overwrite your current journal. Continue?"
    if not yes:
        click.confirm(prompt, abort=True)

    book = app.open_book()
    try:
        book.apply(result.mode, result.trades)
    except TradePulseError as exc:
        raise click.ClickException(str(exc)) from exc
    verb = "Imported" if result.mode == ImportMode.APPEND else "Restored"
    click.echo(f"{verb} {count} trades ({len(book)} total).")


@main.command()
@click.option("--output", default=None, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json", show_default=True)
@click.pass_obj
def export(app: AppContext, output: Path | None, fmt: str) -> None:
    """Write a dated backup (JSON) or a CSV export."""
    trades = app.open_book().trades
    if output is None:
        name = backup_filename(app.clock.now().date())
        if fmt == "csv":
            name = name[: -len(".json")] + ".csv"
        output = Path(app.settings.storage.backup_dir) / name
    payload = dump_backup(trades) if fmt == "json" else dump_csv(trades)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    click.echo(f"Exported {len(trades)} trades to {output}")


@main.command()
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def reset(app: AppContext, yes: bool) -> None:
    """Delete ALL trades."""
    if not yes:
        click.confirm(
            "WARNING: This will delete ALL your trades. This action cannot be undone. Are you sure?",
            abort=True,
        )
    app.open_book().reset()
    click.echo("Journal cleared.")


@main.command()
@_window_options
@click.pass_obj
def coach(app: AppContext, window: str, since: datetime | None) -> None:
    """Ask the AI coach for an analysis of recent trades."""
    from .journal.coach import TradeCoach
    from .llm.client import AnthropicTextClient

    cfg = app.settings.coach
    if not cfg.enabled:
        raise click.ClickException("Coach is disabled in configuration.")
    trades = _windowed(app, app.open_book(), window, since)
    client = AnthropicTextClient(cfg)
    try:
        click.echo(TradeCoach(client, recent_trades=cfg.recent_trades).analyze(trades))
    finally:
        client.close()


@main.command()
@click.argument("trade_id")
@click.pass_obj
def review(app: AppContext, trade_id: str) -> None:
    """Ask the AI coach for feedback on one trade."""
    from .journal.coach import TradeCoach
    from .llm.client import AnthropicTextClient

    cfg = app.settings.coach
    if not cfg.enabled:
        raise click.ClickException("Coach is disabled in configuration.")
    try:
        trade = app.open_book().get(trade_id)
    except TradeNotFoundError as exc:
        raise click.ClickException(f"No trade with id {trade_id}") from exc
    client = AnthropicTextClient(cfg)
    try:
        click.echo(TradeCoach(client).review(trade))
    finally:
        client.close()


if __name__ == "__main__":
    main()
