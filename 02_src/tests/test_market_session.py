"""Tests for market-session classification."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from journeytrace.market_session import get_market_session
from journeytrace.models import MarketSession

EASTERN = ZoneInfo("America/New_York")


class TestGetMarketSession:
    """Tests for get_market_session()."""

    def test_monday_morning_is_market_hours(self):
        """Test that Monday 10:00 Eastern is market hours."""
        now = datetime(2024, 1, 8, 10, 0, tzinfo=EASTERN)
        assert get_market_session(now) is MarketSession.MARKET_HOURS

    def test_pre_market(self):
        """Test that Monday 09:15 Eastern is pre-market."""
        now = datetime(2024, 1, 8, 9, 15, tzinfo=EASTERN)
        assert get_market_session(now) is MarketSession.PRE_MARKET

    def test_late_evening_is_closed(self):
        """Test that Monday 21:00 Eastern is closed."""
        now = datetime(2024, 1, 8, 21, 0, tzinfo=EASTERN)
        assert get_market_session(now) is MarketSession.CLOSED

    def test_after_market(self):
        """Test that the extended window outside regular hours is after-market."""
        assert (
            get_market_session(datetime(2024, 1, 8, 17, 30, tzinfo=EASTERN))
            is MarketSession.AFTER_MARKET
        )
        assert (
            get_market_session(datetime(2024, 1, 8, 5, 0, tzinfo=EASTERN))
            is MarketSession.AFTER_MARKET
        )

    def test_saturday_is_weekend_at_any_hour(self):
        """Test that Saturday is weekend regardless of the hour."""
        for hour in (3, 10, 22):
            now = datetime(2024, 1, 13, hour, 0, tzinfo=EASTERN)
            assert get_market_session(now) is MarketSession.WEEKEND

    def test_boundaries(self):
        """Test that opening and closing instants fall in the later phase."""
        assert (
            get_market_session(datetime(2024, 1, 8, 9, 30, tzinfo=EASTERN))
            is MarketSession.MARKET_HOURS
        )
        assert (
            get_market_session(datetime(2024, 1, 8, 16, 0, tzinfo=EASTERN))
            is MarketSession.AFTER_MARKET
        )
        assert (
            get_market_session(datetime(2024, 1, 8, 20, 0, tzinfo=EASTERN))
            is MarketSession.CLOSED
        )

    def test_utc_input_is_converted(self):
        """Test that UTC instants are classified in Eastern time."""
        # 15:00 UTC in January is 10:00 EST
        now = datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)
        assert get_market_session(now) is MarketSession.MARKET_HOURS

    def test_naive_datetime_treated_as_utc(self):
        """Test that naive datetimes are read as UTC."""
        assert get_market_session(datetime(2024, 1, 8, 15, 0)) is MarketSession.MARKET_HOURS
