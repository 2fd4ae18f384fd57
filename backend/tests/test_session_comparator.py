"""
Tests for session-over-session comparison
"""

from datetime import datetime, timezone

import pytest

from barrels.models.assessment import AssessmentReport, CategoryScore, SessionMetrics, SessionStatus
from barrels.models.ball import ContactQualitySummary
from barrels.services.report_generator import generate_assessment_report
from barrels.services.session_comparator import (
    calculate_delta,
    classify_changes,
    compare_assessments,
    compare_reports,
    find_previous_session,
    overall_trend,
    report_metric_values,
)

from conftest import make_session


def make_report(
    session_id: str,
    overall: float = 70.0,
    bat_speed: float = 68.0,
    sequence: float = 75.0,
    order: float = 100.0,
    barrel_rate: float = 0.3,
    day: int = 1,
) -> AssessmentReport:
    return AssessmentReport(
        session_id=session_id,
        athlete_id="athlete-1",
        session_created_at=datetime(2024, 11, day, tzinfo=timezone.utc),
        overall_score=overall,
        anchor=CategoryScore(score=60.0),
        engine=CategoryScore(score=65.0),
        whip=CategoryScore(score=70.0),
        metrics=SessionMetrics(
            avg_bat_speed=bat_speed,
            avg_sequence_score=sequence,
            avg_sequence_order_score=order,
        ),
        contact_quality=ContactQualitySummary(avg_ev=85.0, barrel_rate=barrel_rate),
    )


def test_metric_values_report_barrel_rate_in_percent():
    values = report_metric_values(make_report("a", barrel_rate=0.25))
    assert values["barrel_rate"] == pytest.approx(25.0)
    assert values["avg_exit_velocity"] == 85.0
    assert values["head_stability_score"] is None
    assert values["avg_sequence_order_score"] == 100.0
    assert len(values) == 11


def test_calculate_delta():
    delta = calculate_delta(75.0, 60.0)
    assert delta.delta == pytest.approx(15.0)
    assert delta.percent_change == pytest.approx(25.0)


def test_delta_from_zero_has_no_percent_change():
    delta = calculate_delta(5.0, 0.0)
    assert delta.delta == 5.0
    assert delta.percent_change is None


def test_delta_with_missing_side_is_empty():
    delta = calculate_delta(None, 60.0)
    assert delta.delta is None
    assert delta.previous == 60.0


def test_thresholds_split_changes():
    metrics = {
        "overall_score": calculate_delta(75.0, 70.0),    # +5, threshold 2
        "avg_bat_speed": calculate_delta(68.5, 68.0),    # +0.5, threshold 1
        "barrel_rate": calculate_delta(20.0, 30.0),      # -10, threshold 2
        "anchor_score": calculate_delta(61.9, 60.0),     # +1.9, threshold 2
        "engine_score": calculate_delta(None, 60.0),
    }
    improvements, declines, unchanged = classify_changes(metrics)
    assert improvements == ["Overall Score (+5.0)"]
    assert declines == ["Barrel Rate (-10.0)"]
    assert unchanged == ["Anchor (Lower Body)", "Bat Speed"]


@pytest.mark.parametrize("improvements,declines,expected", [
    (["a", "b"], ["c"], "improving"),
    (["a"], ["b", "c"], "declining"),
    (["a"], ["b"], "stable"),
    ([], [], "stable"),
])
def test_overall_trend(improvements, declines, expected):
    assert overall_trend(improvements, declines) == expected


def test_compare_reports():
    previous = make_report("old", overall=60.0, bat_speed=64.0, sequence=60.0, day=1)
    current = make_report("new", overall=72.0, bat_speed=68.0, sequence=75.0, day=15)
    comparison = compare_reports(current, previous)

    assert comparison.previous_session_id == "old"
    assert comparison.days_since_previous == 14
    assert comparison.overall_trend == "improving"
    assert "Overall Score (+12.0)" in comparison.improvements
    assert "Bat Speed (+4.0)" in comparison.improvements
    assert "Engine (Core Rotation)" in comparison.unchanged
    assert "14 days after previous evaluation" in comparison.narrative_summary
    assert "Bat speed increased by 4.0 mph" in comparison.narrative_summary


def test_sequence_order_delta_is_reported_but_not_classified():
    previous = make_report("old", order=50.0, day=1)
    current = make_report("new", order=100.0, day=15)
    comparison = compare_reports(current, previous)

    order_delta = comparison.metrics["avg_sequence_order_score"]
    assert order_delta.delta == pytest.approx(50.0)
    assert order_delta.percent_change == pytest.approx(100.0)
    assert comparison.improvements == []
    assert comparison.overall_trend == "stable"


def test_find_previous_session_rules(store):
    store.save_session(make_session("oldest", days_ago=30, status=SessionStatus.COMPLETED))
    store.save_session(make_session("older", days_ago=10, status=SessionStatus.COMPLETED))
    store.save_session(make_session("failed", days_ago=5, status=SessionStatus.FAILED))
    store.save_session(make_session("later", days_ago=-3, status=SessionStatus.COMPLETED))
    store.save_session(make_session("other-athlete", athlete_id="athlete-2", days_ago=1,
                                    status=SessionStatus.COMPLETED))
    for session_id in ("oldest", "older", "later"):
        store.save_report(make_report(session_id))

    current = make_session("current")
    previous_session, previous_report = find_previous_session(current, store)
    assert previous_session.session_id == "older"
    assert previous_report.session_id == "older"


def test_previous_session_needs_a_report(store):
    store.save_session(make_session("older", days_ago=10, status=SessionStatus.COMPLETED))
    assert find_previous_session(make_session("current"), store) is None


def test_no_previous_session_returns_none(store):
    session = make_session("current")
    store.save_session(session)
    generate_assessment_report(session, store)
    assert compare_assessments("athlete-1", "current", store) is None


def test_compare_assessments(store):
    older = make_session("older", days_ago=7, status=SessionStatus.COMPLETED)
    store.save_session(older)
    generate_assessment_report(older, store)

    current = make_session("current")
    store.save_session(current)
    generate_assessment_report(current, store)

    comparison = compare_assessments("athlete-1", "current", store)
    assert comparison.previous_session_id == "older"
    assert comparison.days_since_previous == 7
    assert comparison.improvements == []
    assert comparison.declines == []


def test_compare_unknown_session_is_none(store):
    assert compare_assessments("athlete-1", "missing", store) is None


def test_compare_other_athletes_session_is_none(store):
    store.save_session(make_session("current"))
    assert compare_assessments("athlete-2", "current", store) is None


def test_compare_session_without_report_is_none(store):
    older = make_session("older", days_ago=7, status=SessionStatus.COMPLETED)
    store.save_session(older)
    generate_assessment_report(older, store)
    store.save_session(make_session("new"))

    assert compare_assessments("athlete-1", "new", store) is None
