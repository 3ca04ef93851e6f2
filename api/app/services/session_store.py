from __future__ import annotations

import logging

from tradelists.config import get_settings
from tradelists.session import TradeListSession

logger = logging.getLogger(__name__)

settings = get_settings()

# Process-wide session; routes reach it through dependencies.get_session.
store = TradeListSession.from_settings(settings)
logger.debug("Session store ready (starting capital %.2f)", store.starting_capital)
