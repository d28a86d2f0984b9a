"""Trading-calendar phases."""

from enum import Enum


class MarketSession(str, Enum):
    """Classification of wall-clock time against US equity trading hours."""

    WEEKEND = "weekend"
    PRE_MARKET = "pre_market"
    MARKET_HOURS = "market_hours"
    AFTER_MARKET = "after_market"
    CLOSED = "closed"
