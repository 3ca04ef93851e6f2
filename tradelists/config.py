import os
from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_STARTING_CAPITAL

STARTING_CAPITAL_ENV = "TRADELISTS_STARTING_CAPITAL"
MARGIN_TABLE_ENV = "TRADELISTS_MARGIN_TABLE"
REMOTE_URL_ENV = "TRADELISTS_REMOTE_URL"
REMOTE_KEY_ENV = "TRADELISTS_REMOTE_KEY"
REMOTE_TABLE_ENV = "TRADELISTS_REMOTE_TABLE"
LOG_LEVEL_ENV = "TRADELISTS_LOG_LEVEL"
CORS_ORIGINS_ENV = "API_CORS_ORIGINS"


class ConfigurationError(RuntimeError):
    """Raised when configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    starting_capital: float
    margin_table_path: Optional[str]
    remote_url: Optional[str]
    remote_key: Optional[str]
    remote_table: str
    log_level: str
    cors_origins: str

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_url and self.remote_key)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def get_settings(
    starting_capital: Optional[float] = None,
    remote_url: Optional[str] = None,
    remote_key: Optional[str] = None,
    remote_table: Optional[str] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Load settings from arguments or environment variables.

    Explicit arguments win over the environment, which wins over defaults.

    Raises:
        ConfigurationError: when a numeric variable cannot be parsed.
    """

    capital = starting_capital if starting_capital is not None else _float_env(
        STARTING_CAPITAL_ENV, DEFAULT_STARTING_CAPITAL
    )
    return Settings(
        starting_capital=capital,
        margin_table_path=os.getenv(MARGIN_TABLE_ENV) or None,
        remote_url=(remote_url or os.getenv(REMOTE_URL_ENV) or None),
        remote_key=(remote_key or os.getenv(REMOTE_KEY_ENV) or None),
        remote_table=remote_table or os.getenv(REMOTE_TABLE_ENV, "csv_files"),
        log_level=(log_level or os.getenv(LOG_LEVEL_ENV, "INFO")).upper(),
        cors_origins=os.getenv(CORS_ORIGINS_ENV, "*"),
    )
