# tradelists/constants.py

from __future__ import annotations

APP_TITLE = "Trade List Portfolio Analyzer"
DEFAULT_STARTING_CAPITAL = 1_000_000.0

# Raw broker exports carry this banner somewhere in the file.
RAW_EXPORT_MARKER = "TradeStation Trades List"
# Trailer that ends the trade rows in both layouts.
TRADES_LIST_MARKER = "Trades List"
RAW_HEADER_LINE = 4
RAW_DATA_START_LINE = 6

CUM_PROFIT_MARKER = "Cum Net Profit"
DATE_TIME_MARKER = "Date/Time"
NOT_AVAILABLE = "n/a"

# Header substrings of columns holding currency-formatted cells.
CURRENCY_COLUMNS = (
    "Shares/Ctrts - Profit/Loss",
    "Net Profit - Cum Net Profit",
    "Profit/Loss",
    "Cum Net Profit",
)

BENCHMARK_TAG = "_benchmark"
INTRADAY_TAG = "DTH"
# Intraday (day trade hours) margin is a tenth of the overnight requirement.
INTRADAY_MARGIN_DIVISOR = 10.0

# Initial margin per contract, keyed by upper-case root symbol.
# NOTE: values are indicative; override with TRADELISTS_MARGIN_TABLE.
MARGIN_RATES: dict[str, float] = {
    "ES": 15000.0,
    "MES": 2300.0,
    "NQ": 21000.0,
    "MNQ": 3250.0,
    "YM": 10000.0,
    "MYM": 1500.0,
    "RTY": 7500.0,
    "M2K": 1000.0,
    "CL": 6500.0,
    "MCL": 650.0,
    "NG": 3800.0,
    "GC": 10000.0,
    "MGC": 1000.0,
    "SI": 13000.0,
    "SIL": 2600.0,
    "HG": 6000.0,
    "ZB": 5000.0,
    "ZN": 2500.0,
    "ZF": 1500.0,
    "ZC": 1500.0,
    "ZS": 2500.0,
    "ZW": 2000.0,
    "CD": 1100.0,
    "JY": 3100.0,
    "NE1": 1500.0,
    "6E": 2600.0,
    "6B": 2000.0,
    "6A": 1400.0,
}

DEFAULT_CONTRACT_MULTIPLIER = 1.0
MIN_CONTRACT_MULTIPLIER = 0.1
MAX_CONTRACT_MULTIPLIER = 100_000.0

# Fields scaled by a contract multiplier; counts, rates and dates are not.
MULTIPLIED_FIELDS = (
    "net_profit",
    "average_win",
    "average_loss",
    "max_drawdown",
    "expected_value",
    "margin",
)
