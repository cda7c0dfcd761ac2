"""
Readiness trend analysis.

Turns a flat score history into one trend per service by comparing each
service's two most recent scores.
"""

from __future__ import annotations

from collections.abc import Iterable

from ravegraph.core.constants import TREND_THRESHOLD
from ravegraph.domain.models import ReadinessScore, ReadinessTrend, TrendDirection


def classify_trend(
    current: float,
    previous: float | None,
    threshold: float = TREND_THRESHOLD,
) -> TrendDirection:
    """
    Determine trend direction.

    Args:
        current: Most recent score
        previous: Score recorded before it, None for a first measurement
        threshold: Change that still counts as stable (inclusive)

    Returns:
        NEW without a previous score, otherwise IMPROVING, DECLINING or STABLE
    """
    if previous is None:
        return TrendDirection.NEW

    diff = current - previous
    if diff > threshold:
        return TrendDirection.IMPROVING
    elif diff < -threshold:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def build_trends(
    scores: Iterable[ReadinessScore],
    threshold: float = TREND_THRESHOLD,
) -> list[ReadinessTrend]:
    """
    Build one trend per service.

    Scores are expected newest-first within each service (the order
    ``list_scores`` returns); the input order is trusted, never re-sorted.
    Services come out in the order they first appear.
    """
    groups: dict[str, list[ReadinessScore]] = {}
    for score in scores:
        groups.setdefault(score.service_id, []).append(score)

    trends: list[ReadinessTrend] = []
    for service_id, history in groups.items():
        current = history[0]
        previous = history[1].score if len(history) > 1 else None
        trends.append(
            ReadinessTrend(
                service_id=service_id,
                service_name=current.service_name,
                current_score=current.score,
                previous_score=previous,
                trend=classify_trend(current.score, previous, threshold),
                scores=history,
            )
        )
    return trends
