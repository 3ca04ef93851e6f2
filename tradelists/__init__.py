"""Portfolio analysis for TradeStation trade-list CSV exports."""

from .session import TradeListSession

__all__ = ["TradeListSession"]
