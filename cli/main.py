from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import click

from tradelists.config import ConfigurationError, get_settings
from tradelists.remote import RemoteFetchError, SupabaseSource
from tradelists.session import TradeListSession

from .options import contract_option, date_range_options, paths_argument


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _resolve_name(session: TradeListSession, name: str) -> str:
    for candidate in (name, f"{name}.csv"):
        if candidate in session.tables:
            return candidate
    raise click.BadParameter(f"No loaded trade list named {name!r}", param_hint="--contract")


def _load_session(
    paths: tuple[Path, ...],
    capital: Optional[float] = None,
    contracts: Optional[Dict[str, float]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> TradeListSession:
    """Ingest local files, apply multipliers/date range and select everything that loaded."""
    try:
        settings = get_settings(starting_capital=capital)
        session = TradeListSession.from_settings(settings)
    except (ConfigurationError, ValueError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc

    seen: Dict[str, Path] = {}
    for path in paths:
        if path.name in seen:
            click.echo(f"Warning: {path.name} given more than once; {path} replaces {seen[path.name]}", err=True)
        seen[path.name] = path

    batch = [(path.name, path.read_text(encoding="utf-8-sig", errors="replace")) for path in paths]
    session.ingest(batch)
    for message in session.errors:
        click.echo(message, err=True)

    for name, value in (contracts or {}).items():
        session.set_contract(_resolve_name(session, name), value)
    session.set_date_range(start_date, end_date)
    session.select(list(session.tables))
    return session


@click.group()
@click.option(
    "--log-level",
    envvar="TRADELISTS_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (env: TRADELISTS_LOG_LEVEL)",
)
def cli(log_level: str) -> None:
    """Analyze TradeStation trade-list CSV exports from the command line."""

    logging.basicConfig(level=getattr(logging, log_level.upper()), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@paths_argument
@contract_option
@click.option("--sort", "sort_key", help="StrategyMetrics field to sort by (e.g. net_profit).")
@click.option("--desc", is_flag=True, help="Sort descending.")
def metrics(paths: tuple[Path, ...], contracts: Dict[str, float], sort_key: Optional[str], desc: bool) -> None:
    """Per-strategy metrics for each trade list."""

    session = _load_session(paths, contracts=contracts)
    try:
        rows = session.sorted_metrics(sort_key, "desc" if desc else "asc")
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json([m.summary() for m in rows])


@cli.command()
@paths_argument
@date_range_options
@click.option("--capital", type=float, help="Starting capital (env: TRADELISTS_STARTING_CAPITAL).")
@contract_option
def portfolio(
    paths: tuple[Path, ...],
    start_date: Optional[date],
    end_date: Optional[date],
    capital: Optional[float],
    contracts: Dict[str, float],
) -> None:
    """Combined equity curve and portfolio metrics of all given trade lists."""

    session = _load_session(paths, capital, contracts, start_date, end_date)
    result = session.portfolio()
    if result is None:
        raise click.ClickException("No trade lists could be loaded.")
    _echo_json(result.to_dict())


@cli.command()
@paths_argument
@date_range_options
@click.option("--normalize", is_flag=True, help="Express equity as a percentage of margin.")
@contract_option
def series(
    paths: tuple[Path, ...],
    start_date: Optional[date],
    end_date: Optional[date],
    normalize: bool,
    contracts: Dict[str, float],
) -> None:
    """Per-strategy cumulative equity series plus the overlay table."""

    session = _load_session(paths, contracts=contracts, start_date=start_date, end_date=end_date)
    session.normalize_equity = normalize
    _echo_json({
        "series": [asdict(s) for s in session.strategy_series()],
        "overlay": session.overlay(),
    })


@cli.command()
@paths_argument
@date_range_options
@click.option("--csv", "as_csv", is_flag=True, help="Print correlation pairs as CSV instead of JSON.")
def correlations(paths: tuple[Path, ...], start_date: Optional[date], end_date: Optional[date], as_csv: bool) -> None:
    """Spearman correlation matrix of daily returns."""

    session = _load_session(paths, start_date=start_date, end_date=end_date)
    if as_csv:
        body = session.export_correlation()
    else:
        result = session.correlation()
        body = result.to_dict() if result is not None else None
    if body is None:
        raise click.ClickException("At least two trade lists with trades are required.")
    if as_csv:
        click.echo(body)
    else:
        _echo_json(body)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the cleaned CSV here.")
def clean(path: Path, output: Optional[Path]) -> None:
    """Parse one trade list and emit it with currency columns normalised."""

    session = _load_session((path,))
    if path.name not in session.tables:
        raise click.ClickException(f"Could not parse {path.name}.")
    download_name, body = session.export_cleaned(path.name)
    if output is None:
        click.echo(body)
        return
    output.write_text(body + "\n", encoding="utf-8")
    click.echo(f"Wrote {output} ({download_name})", err=True)


@cli.command()
@click.option("--base-url", envvar="TRADELISTS_REMOTE_URL", help="Remote store URL (env: TRADELISTS_REMOTE_URL)")
@click.option("--api-key", envvar="TRADELISTS_REMOTE_KEY", help="Remote store key (env: TRADELISTS_REMOTE_KEY)")
@click.option("--table", help="Table holding filename/file_content rows.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
)
def fetch(base_url: Optional[str], api_key: Optional[str], table: Optional[str], output_dir: Path) -> None:
    """Download trade lists from the remote store into a directory."""

    try:
        settings = get_settings(remote_url=base_url, remote_key=api_key, remote_table=table)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    if not settings.remote_configured:
        raise click.ClickException("Remote store URL and key are required. Pass --base-url and --api-key.")

    source = SupabaseSource(settings.remote_url, settings.remote_key, table=settings.remote_table)
    try:
        remote_files = source.fetch()
    except RemoteFetchError as exc:
        raise click.ClickException(f"Remote fetch error: {exc}") from exc

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for remote_file in remote_files:
        target = output_dir / Path(remote_file.filename).name
        target.write_text(remote_file.content, encoding="utf-8")
        written.append(str(target))
    _echo_json(written)


if __name__ == "__main__":
    cli()
