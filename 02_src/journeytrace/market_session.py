"""Market-session classification against US Eastern trading hours."""

from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo

from .models import MarketSession

EASTERN = ZoneInfo("America/New_York")

PRE_MARKET_OPEN = time(9, 0)
MARKET_OPEN = time(9, 30)
MARKET_CLOSE = time(16, 0)
EXTENDED_OPEN = time(4, 0)
EXTENDED_CLOSE = time(20, 0)


def get_market_session(now: datetime | None = None) -> MarketSession:
    """
    Classify a wall-clock instant into a trading phase.

    Naive datetimes are taken as UTC. Saturday and Sunday are always
    WEEKEND. On weekdays 09:00-09:30 is PRE_MARKET, 09:30-16:00 is
    MARKET_HOURS, the rest of 04:00-20:00 is AFTER_MARKET and anything
    outside that window is CLOSED.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    eastern = now.astimezone(EASTERN)
    if eastern.weekday() >= 5:
        return MarketSession.WEEKEND

    clock = eastern.time()
    if PRE_MARKET_OPEN <= clock < MARKET_OPEN:
        return MarketSession.PRE_MARKET
    if MARKET_OPEN <= clock < MARKET_CLOSE:
        return MarketSession.MARKET_HOURS
    if EXTENDED_OPEN <= clock < EXTENDED_CLOSE:
        return MarketSession.AFTER_MARKET
    return MarketSession.CLOSED
