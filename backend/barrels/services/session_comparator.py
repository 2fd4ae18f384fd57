"""
Session-over-session comparison for an athlete's assessments
"""

from typing import Dict, List, Optional, Tuple

from barrels.models.assessment import (
    AssessmentReport,
    AssessmentSession,
    ComparisonSummary,
    MetricDelta,
    SessionStatus,
)
from barrels.services.storage import AssessmentStore
from barrels.utils.logger import get_logger, log_function_call
from barrels.utils.scoring_configs import COMPARISON_METRICS

logger = get_logger(__name__)


def report_metric_values(report: AssessmentReport) -> Dict[str, Optional[float]]:
    """
    The compared metrics of one report; barrel rate in percent.

    Only the metrics in COMPARISON_METRICS count towards improvements and declines;
    the sequence order score is reported as a delta alone.
    """
    contact = report.contact_quality
    barrel_rate = contact.barrel_rate if contact else None
    return {
        "overall_score": report.overall_score,
        "anchor_score": report.anchor.score,
        "engine_score": report.engine.score,
        "whip_score": report.whip.score,
        "avg_bat_speed": report.metrics.avg_bat_speed,
        "head_stability_score": report.metrics.head_stability_score,
        "overall_stability_score": report.metrics.overall_stability_score,
        "avg_sequence_score": report.metrics.avg_sequence_score,
        "avg_sequence_order_score": report.metrics.avg_sequence_order_score,
        "avg_exit_velocity": contact.avg_ev if contact else None,
        "barrel_rate": barrel_rate * 100.0 if barrel_rate is not None else None,
    }


def calculate_delta(current: Optional[float], previous: Optional[float]) -> MetricDelta:
    if current is None or previous is None:
        return MetricDelta(current=current, previous=previous)
    delta = current - previous
    percent_change = delta / previous * 100.0 if previous != 0 else None
    return MetricDelta(current=current, previous=previous, delta=delta, percent_change=percent_change)


def classify_changes(metrics: Dict[str, MetricDelta]) -> Tuple[List[str], List[str], List[str]]:
    """Split tracked metrics into improvements, declines and unchanged by per-metric thresholds"""
    improvements: List[str] = []
    declines: List[str] = []
    unchanged: List[str] = []

    for tracked in COMPARISON_METRICS:
        metric = metrics.get(tracked.key)
        if metric is None or metric.delta is None:
            continue
        if abs(metric.delta) < tracked.threshold:
            unchanged.append(tracked.label)
        elif metric.delta > 0:
            improvements.append(f"{tracked.label} (+{metric.delta:.1f})")
        else:
            declines.append(f"{tracked.label} ({metric.delta:.1f})")

    return improvements, declines, unchanged


def overall_trend(improvements: List[str], declines: List[str]) -> str:
    if len(improvements) > len(declines) and improvements:
        return "improving"
    if len(declines) > len(improvements) and declines:
        return "declining"
    return "stable"


def build_narrative(
    metrics: Dict[str, MetricDelta],
    improvements: List[str],
    declines: List[str],
    trend: str,
    days_since_previous: Optional[int],
) -> str:
    parts: List[str] = []

    if days_since_previous:
        parts.append(f"Assessment conducted {days_since_previous} days after previous evaluation.")

    parts.append(f"**Overall Trend: {trend.upper()}**")

    if improvements:
        parts.append("**Key Improvements:**\n" + "\n".join(f"- {item}" for item in improvements))
    if declines:
        parts.append("**Areas Needing Attention:**\n" + "\n".join(f"- {item}" for item in declines))

    notable = []
    overall_delta = metrics["overall_score"].delta
    if overall_delta is not None and abs(overall_delta) >= 5:
        direction = "increased" if overall_delta > 0 else "decreased"
        notable.append(f"**Notable:** Overall score {direction} by {abs(overall_delta):.1f} points.")
    bat_speed_delta = metrics["avg_bat_speed"].delta
    if bat_speed_delta is not None and abs(bat_speed_delta) >= 2:
        direction = "increased" if bat_speed_delta > 0 else "decreased"
        notable.append(f"**Notable:** Bat speed {direction} by {abs(bat_speed_delta):.1f} mph.")
    sequence_delta = metrics["avg_sequence_score"].delta
    if sequence_delta is not None and abs(sequence_delta) >= 5:
        direction = "improved" if sequence_delta > 0 else "declined"
        notable.append(f"**Notable:** Kinematic sequencing {direction} significantly.")
    if notable:
        parts.append("\n".join(notable))

    return "\n\n".join(parts)


def compare_reports(
    current: AssessmentReport,
    previous: AssessmentReport,
    previous_session: Optional[AssessmentSession] = None,
) -> ComparisonSummary:
    """Compare two reports of the same athlete"""
    current_values = report_metric_values(current)
    previous_values = report_metric_values(previous)
    metrics = {
        key: calculate_delta(current_values[key], previous_values[key])
        for key in current_values
    }

    previous_date = previous_session.created_at if previous_session else previous.session_created_at
    days_since_previous = None
    if previous_date is not None and current.session_created_at is not None:
        days_since_previous = (current.session_created_at - previous_date).days

    improvements, declines, unchanged = classify_changes(metrics)
    trend = overall_trend(improvements, declines)

    return ComparisonSummary(
        previous_session_id=previous.session_id,
        previous_assessment_date=previous_date,
        days_since_previous=days_since_previous,
        metrics=metrics,
        improvements=improvements,
        declines=declines,
        unchanged=unchanged,
        overall_trend=trend,
        narrative_summary=build_narrative(metrics, improvements, declines, trend, days_since_previous),
    )


def find_previous_session(
    session: AssessmentSession,
    store: AssessmentStore,
) -> Optional[Tuple[AssessmentSession, AssessmentReport]]:
    """
    Most recent completed session of the same athlete created strictly before
    `session`, together with its stored report
    """
    candidates = [
        other for other in store.list_sessions(session.athlete_id)
        if other.session_id != session.session_id
        and other.status == SessionStatus.COMPLETED
        and other.created_at < session.created_at
    ]
    if not candidates:
        return None

    previous = max(candidates, key=lambda other: other.created_at)
    report = store.get_report(previous.session_id)
    if report is None:
        logger.warning(f"Previous session {previous.session_id} has no stored report")
        return None
    return previous, report


@log_function_call
def compare_assessments(
    athlete_id: str,
    session_id: str,
    store: AssessmentStore,
) -> Optional[ComparisonSummary]:
    """
    Compare a session's stored report with the athlete's previous assessment.

    Returns None when there is nothing to compare: the session is unknown for
    this athlete, it has no report yet, or there is no earlier completed assessment.
    """
    session = store.get_session(session_id)
    if session is None or session.athlete_id != athlete_id:
        logger.warning(f"Session {session_id} not found for athlete {athlete_id}")
        return None

    report = store.get_report(session_id)
    if report is None:
        logger.info(f"Session {session_id} has no report to compare yet")
        return None

    previous = find_previous_session(session, store)
    if previous is None:
        logger.info(f"No previous assessment found for athlete {athlete_id}")
        return None

    previous_session, previous_report = previous
    comparison = compare_reports(report, previous_report, previous_session)
    logger.info(
        f"Compared session {session_id} with {previous_session.session_id}: trend {comparison.overall_trend}"
    )
    return comparison
