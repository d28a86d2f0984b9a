"""Tests for the Web Vitals performance score."""

from journeytrace.materializer import calculate_performance_score, performance_score


class TestPerformanceScore:
    """Tests for performance_score()."""

    def test_good_vitals_score_full(self):
        """Test that good LCP, FID and CLS keep the full score."""
        assert performance_score(lcp=2000, fid=80, cls=0.05) == 100

    def test_poor_vitals_score(self):
        """Test that poor values on all three lose 75 points."""
        assert performance_score(lcp=5000, fid=400, cls=0.3) == 25

    def test_needs_improvement(self):
        """Test the middle band penalties."""
        assert performance_score(lcp=3000, fid=150, cls=0.15) == 65

    def test_missing_metrics_not_penalized(self):
        """Test that absent metrics cost nothing."""
        assert performance_score() == 100
        assert performance_score(lcp=5000) == 70

    def test_score_never_negative(self):
        """Test that the score is clamped at zero."""
        assert performance_score(lcp=10**6, fid=10**6, cls=10) >= 0


class TestCalculatePerformanceScore:
    """Tests for calculate_performance_score()."""

    def test_reads_attribute_map(self):
        """Test that the score is read from journey attributes."""
        assert calculate_performance_score({"lcp": 2000, "fid": 80, "cls": 0.05}) == 100

    def test_no_attributes(self):
        """Test that no attribute map yields no score."""
        assert calculate_performance_score(None) is None

    def test_non_numeric_values_ignored(self):
        """Test that non-numeric vitals are treated as missing."""
        assert calculate_performance_score({"lcp": "slow", "fid": True}) == 100
