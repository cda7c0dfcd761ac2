"""Tests for readiness trend classification."""

from datetime import UTC, datetime, timedelta

import pydantic
import pytest

from ravegraph.domain.models import ReadinessScore, TrendDirection
from ravegraph.readiness.trends import build_trends, classify_trend

BASE = datetime(2026, 2, 10, tzinfo=UTC)


def score(service_id: str, value: float, days_ago: int = 0, name: str | None = None, id: int = 1):
    recorded = BASE - timedelta(days=days_ago)
    return ReadinessScore(
        id=id,
        service_id=service_id,
        service_name=name or service_id.upper(),
        score=value,
        recorded_at=recorded,
        created_at=recorded,
    )


class TestClassifyTrend:
    def test_improving(self):
        assert classify_trend(90, 80) == TrendDirection.IMPROVING

    def test_declining(self):
        assert classify_trend(70, 80) == TrendDirection.DECLINING

    def test_small_change_is_stable(self):
        assert classify_trend(80.5, 80) == TrendDirection.STABLE

    def test_threshold_is_inclusive(self):
        """A change of exactly one point either way stays stable."""
        assert classify_trend(81, 80) == TrendDirection.STABLE
        assert classify_trend(79, 80) == TrendDirection.STABLE

    def test_just_past_threshold(self):
        assert classify_trend(81.01, 80) == TrendDirection.IMPROVING
        assert classify_trend(78.99, 80) == TrendDirection.DECLINING

    def test_no_previous_is_new(self):
        assert classify_trend(85, None) == TrendDirection.NEW

    def test_custom_threshold(self):
        assert classify_trend(85, 80, threshold=10) == TrendDirection.STABLE


class TestBuildTrends:
    def test_empty_input(self):
        assert build_trends([]) == []

    def test_improving_service(self):
        trends = build_trends([score("svc-1", 90, 0), score("svc-1", 80, 1)])

        assert len(trends) == 1
        trend = trends[0]
        assert trend.service_id == "svc-1"
        assert trend.current_score == 90
        assert trend.previous_score == 80
        assert trend.trend == TrendDirection.IMPROVING
        assert [s.score for s in trend.scores] == [90, 80]

    def test_stable_service(self):
        trends = build_trends([score("svc-1", 80.5, 0), score("svc-1", 80, 1)])
        assert trends[0].trend == TrendDirection.STABLE

    def test_single_score_is_new(self):
        trends = build_trends([score("svc-1", 72)])

        assert trends[0].trend == TrendDirection.NEW
        assert trends[0].previous_score is None

    def test_only_two_most_recent_scores_compared(self):
        trends = build_trends(
            [score("svc-1", 70, 0), score("svc-1", 75, 1), score("svc-1", 20, 2)]
        )

        assert trends[0].trend == TrendDirection.DECLINING
        assert len(trends[0].scores) == 3

    def test_groups_in_first_seen_order(self):
        trends = build_trends(
            [
                score("zeta", 50, 0),
                score("alpha", 60, 0),
                score("zeta", 40, 1),
                score("alpha", 70, 1),
            ]
        )

        assert [t.service_id for t in trends] == ["zeta", "alpha"]
        assert trends[0].trend == TrendDirection.IMPROVING
        assert trends[1].trend == TrendDirection.DECLINING

    def test_input_order_is_trusted(self):
        """The first score in a group is current even if it is older."""
        trends = build_trends([score("svc-1", 60, 5), score("svc-1", 90, 0)])

        assert trends[0].current_score == 60
        assert trends[0].trend == TrendDirection.DECLINING

    def test_service_name_comes_from_current_score(self):
        trends = build_trends(
            [score("svc-1", 80, 0, name="Renamed"), score("svc-1", 80, 1, name="Old")]
        )
        assert trends[0].service_name == "Renamed"


def test_score_requires_service_id():
    with pytest.raises(pydantic.ValidationError):
        score("", 50)
