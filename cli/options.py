from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click

from tradelists.helpers import normalize_date
from tradelists.metrics import clamp_multiplier


def _iso_date(_: click.Context, __: click.Parameter, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    parsed = normalize_date(value)
    if parsed is None:
        raise click.BadParameter("Use ISO 8601 dates (YYYY-MM-DD).")
    return parsed


def _contract_pairs(_: click.Context, __: click.Parameter, value: tuple[str, ...]) -> Dict[str, float]:
    contracts: Dict[str, float] = {}
    for entry in value:
        if "=" not in entry:
            raise click.BadParameter("Contracts must be in NAME=VALUE form.")
        name, raw = entry.rsplit("=", 1)
        try:
            float(raw)
        except ValueError as exc:
            raise click.BadParameter(f"Contract value for {name!r} is not a number: {raw!r}") from exc
        contracts[name.strip()] = clamp_multiplier(raw)
    return contracts


def paths_argument(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.argument(
        "paths",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        nargs=-1,
        required=True,
    )(func)


def contract_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--contract",
        "contracts",
        multiple=True,
        callback=_contract_pairs,
        help="Contract multiplier in NAME=VALUE form (file name with or without .csv). Can be repeated.",
    )(func)


def date_range_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--start-date", callback=_iso_date, help="Inclusive start date (YYYY-MM-DD)."),
        click.option("--end-date", callback=_iso_date, help="Inclusive end date (YYYY-MM-DD)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func
