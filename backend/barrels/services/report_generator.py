"""
Multi-swing assessment report generation

Aggregates per-swing metrics across a session into Anchor / Engine / Whip
category scores, blends them with contact quality into an overall score and
writes the narrative sections of the report.
"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from barrels.analyzers.contact_quality import compute_contact_quality_summary
from barrels.analyzers.swing_analyzer import swing_analyzer
from barrels.models.assessment import (
    AssessmentReport,
    AssessmentSession,
    CategoryScore,
    ComparisonSummary,
    FieldAggregate,
    ReportEntry,
    SessionMetrics,
    SessionStatus,
)
from barrels.models.ball import ContactQualitySummary
from barrels.models.metrics import SwingMetrics
from barrels.models.pose import Swing
from barrels.services.session_comparator import compare_reports, find_previous_session
from barrels.services.storage import AssessmentStore
from barrels.utils.errors import AssessmentError, EmptySessionError, MissingDataError, SessionNotFoundError
from barrels.utils.logger import LoggerMixin, PerformanceLogger, get_logger
from barrels.utils.scoring_configs import (
    OVERALL_SCORE_WEIGHTS,
    REPORT_CALIBRATION,
    SCORE_EXPLANATIONS,
    SCORING_CONFIG_VERSION,
    STRENGTH_WEAKNESS_RULES,
    deviation_score,
    get_performance_tier,
    get_score_grade,
    normalize_to_range,
    weighted_average,
)

logger = get_logger(__name__)

# Per-swing fields aggregated into SessionMetrics.field_aggregates
TRACKED_FIELDS: Tuple[str, ...] = tuple(
    name for name in SwingMetrics.model_fields
    if name not in ("swing_id", "impact_frame", "load_frame", "launch_frame", "sequence_order")
)


# ===== Aggregation helpers =====

def field_values(swing_metrics: List[SwingMetrics], field: str) -> List[float]:
    """Available, finite values of one field across swings"""
    values = []
    for metrics in swing_metrics:
        value = getattr(metrics, field)
        if value is not None and math.isfinite(value):
            values.append(float(value))
    return values


def mean_or_none(values: List[float]) -> Optional[float]:
    return float(np.mean(values)) if values else None


def max_or_none(values: List[float]) -> Optional[float]:
    return float(max(values)) if values else None


def stddev_or_none(values: List[float]) -> Optional[float]:
    """Population standard deviation"""
    return float(np.std(values)) if values else None


def consistency_score(values: List[float]) -> Optional[float]:
    """100 for identical values, losing 2 points per unit of standard deviation"""
    sd = stddev_or_none(values)
    if sd is None:
        return None
    return max(0.0, 100.0 - sd * REPORT_CALIBRATION.consistency_sd_multiplier)


def aggregate_field(values: List[float]) -> FieldAggregate:
    return FieldAggregate(
        count=len(values),
        mean=mean_or_none(values),
        max=max_or_none(values),
        stddev=stddev_or_none(values),
        consistency=consistency_score(values),
    )


def average_terms(terms: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the terms that are available and finite"""
    available = [term for term in terms if term is not None and math.isfinite(term)]
    return float(np.mean(available)) if available else None


def _fmt(value: Optional[float], digits: int = 1) -> str:
    return f"{value:.{digits}f}" if value is not None else "N/A"


class ReportGenerator(LoggerMixin):
    """Builds AssessmentReports from analyzed swings and ball events"""

    def __init__(self):
        self.calibration = REPORT_CALIBRATION
        self.perf = PerformanceLogger("report_generator")

    # ----- swing analysis -----

    def analyze_swings(self, swings: List[Swing]) -> Tuple[List[SwingMetrics], int]:
        """Analyze every swing, excluding the ones without usable data"""
        analyzed: List[SwingMetrics] = []
        excluded = 0
        for swing in swings:
            try:
                analyzed.append(swing_analyzer.analyze(swing))
            except MissingDataError as e:
                excluded += 1
                self.logger.warning(f"Excluding swing {swing.swing_id or '<unnamed>'}: {str(e)}")
        return analyzed, excluded

    # ----- session aggregation -----

    def aggregate_metrics(self, swing_metrics: List[SwingMetrics]) -> SessionMetrics:
        values = {field: field_values(swing_metrics, field) for field in TRACKED_FIELDS}

        def avg(field: str) -> Optional[float]:
            return mean_or_none(values[field])

        def peak(field: str) -> Optional[float]:
            return max_or_none(values[field])

        def consistency(field: str) -> Optional[float]:
            return consistency_score(values[field])

        metrics = SessionMetrics(
            # Motion
            avg_bat_speed=avg("avg_bat_speed_mph"),
            max_bat_speed=peak("max_bat_speed_mph"),
            avg_hand_speed=avg("avg_hand_speed_mph"),
            max_hand_speed=peak("max_hand_speed_mph"),
            avg_load_to_launch=avg("load_to_launch_ms"),
            avg_launch_to_impact=avg("launch_to_impact_ms"),
            avg_swing_duration=avg("swing_duration_ms"),
            avg_pelvis_velocity=avg("pelvis_max_angular_velocity"),
            avg_torso_velocity=avg("torso_max_angular_velocity"),
            avg_arm_velocity=avg("arm_max_angular_velocity"),
            avg_bat_velocity=avg("bat_max_angular_velocity"),
            motion_consistency_score=consistency("avg_bat_speed_mph"),

            # Stability
            avg_spine_tilt_at_launch=avg("spine_tilt_at_launch_deg"),
            avg_pelvis_angle_at_launch=avg("pelvis_angle_at_launch_deg"),
            avg_shoulder_tilt_at_launch=avg("shoulder_tilt_at_launch_deg"),
            avg_spine_tilt_at_impact=avg("spine_tilt_at_impact_deg"),
            avg_pelvis_angle_at_impact=avg("pelvis_angle_at_impact_deg"),
            avg_shoulder_tilt_at_impact=avg("shoulder_tilt_at_impact_deg"),
            avg_front_knee_angle=avg("front_knee_flexion_at_impact_deg"),
            avg_x_factor=avg("hip_shoulder_separation_deg"),
            avg_head_displacement=avg("head_displacement_cm"),
            avg_stride_length_factor=avg("stride_length_factor"),
            spine_tilt_consistency_score=consistency("spine_tilt_at_launch_deg"),
            pelvis_angle_consistency_score=consistency("pelvis_angle_at_launch_deg"),
            head_stability_score=consistency("head_displacement_cm"),

            # Sequencing
            avg_pelvis_peak_timing=avg("pelvis_peak_timing_ms"),
            avg_torso_peak_timing=avg("torso_peak_timing_ms"),
            avg_arm_peak_timing=avg("arm_peak_timing_ms"),
            avg_bat_peak_timing=avg("bat_peak_timing_ms"),
            avg_pelvis_to_torso_gap=avg("pelvis_to_torso_gap_ms"),
            avg_torso_to_arm_gap=avg("torso_to_arm_gap_ms"),
            avg_arm_to_bat_gap=avg("arm_to_bat_gap_ms"),
            avg_sequence_score=avg("sequence_score"),
            avg_sequence_order_score=avg("sequence_order_score"),
            avg_sequence_timing_score=avg("sequence_timing_score"),
            sequence_consistency=consistency("sequence_score"),

            consistency_score=average_terms([
                consistency("avg_bat_speed_mph"),
                consistency("sequence_score"),
            ]),
            avg_swing_score=avg("overall_score"),
            field_aggregates={field: aggregate_field(values[field]) for field in TRACKED_FIELDS},
        )
        return metrics

    def category_scores(self, swing_metrics: List[SwingMetrics]) -> Dict[str, CategoryScore]:
        """Anchor (lower body), Engine (core rotation) and Whip (upper body and bat)"""
        cal = self.calibration
        values = {field: field_values(swing_metrics, field) for field in TRACKED_FIELDS}

        def avg(field: str) -> Optional[float]:
            return mean_or_none(values[field])

        def consistency(field: str) -> Optional[float]:
            return consistency_score(values[field])

        stride_sd = stddev_or_none(values["stride_length_factor"])
        avg_order = avg("sequence_order_score")

        anchor = (
            average_terms([
                deviation_score(avg("load_to_launch_ms"), cal.load_to_launch),
                deviation_score(avg("pelvis_peak_timing_ms"), cal.pelvis_peak),
                consistency("load_to_launch_ms"),
            ]),
            average_terms([
                consistency("back_knee_flexion_at_launch_deg"),
                consistency("front_knee_flexion_at_impact_deg"),
                consistency("head_displacement_cm"),
                max(0.0, 100.0 - stride_sd * cal.stride_sd_multiplier) if stride_sd is not None else None,
            ]),
            average_terms([
                min(100.0, avg_order * cal.order_score_multiplier) if avg_order is not None else None,
                deviation_score(avg("pelvis_peak_timing_ms"), cal.pelvis_peak),
            ]),
        )

        engine = (
            average_terms([
                deviation_score(avg("pelvis_to_torso_gap_ms"), cal.segment_gap_motion),
                deviation_score(avg("torso_peak_timing_ms"), cal.torso_peak),
                consistency("pelvis_peak_timing_ms"),
            ]),
            average_terms([
                consistency("spine_tilt_at_launch_deg"),
                consistency("spine_tilt_at_impact_deg"),
                consistency("pelvis_angle_at_launch_deg"),
                consistency("pelvis_angle_at_impact_deg"),
                deviation_score(avg("hip_shoulder_separation_deg"), cal.x_factor),
            ]),
            average_terms([
                avg_order,
                avg("sequence_timing_score"),
                deviation_score(avg("pelvis_to_torso_gap_ms"), cal.segment_gap_sequencing),
            ]),
        )

        whip = (
            average_terms([
                deviation_score(avg("torso_to_arm_gap_ms"), cal.segment_gap_motion),
                deviation_score(avg("arm_to_bat_gap_ms"), cal.segment_gap_motion),
                deviation_score(avg("bat_peak_timing_ms"), cal.bat_peak),
                consistency("torso_to_arm_gap_ms"),
            ]),
            average_terms([
                consistency("shoulder_tilt_at_impact_deg"),
                consistency("lead_elbow_angle_deg"),
                consistency("rear_elbow_angle_deg"),
                consistency("front_knee_flexion_at_impact_deg"),
            ]),
            average_terms([
                deviation_score(avg("torso_to_arm_gap_ms"), cal.segment_gap_sequencing),
                deviation_score(avg("arm_to_bat_gap_ms"), cal.segment_gap_sequencing),
                avg("sequence_timing_score"),
            ]),
        )

        return {
            "anchor": self._category(anchor, cal.anchor_weights),
            "engine": self._category(engine, cal.engine_weights),
            "whip": self._category(whip, cal.whip_weights),
        }

    @staticmethod
    def _category(
        sub_scores: Tuple[Optional[float], Optional[float], Optional[float]],
        weights: Tuple[float, float, float],
    ) -> CategoryScore:
        motion, stability, sequencing = sub_scores
        return CategoryScore(
            score=weighted_average(zip(sub_scores, weights)),
            motion=motion,
            stability=stability,
            sequencing=sequencing,
        )

    def overall_score(
        self,
        metrics: SessionMetrics,
        contact: Optional[ContactQualitySummary],
    ) -> Optional[float]:
        """Weighted blend of swing and ball-flight results over whatever is available"""
        cal = self.calibration
        avg_ev = contact.avg_ev if contact else None
        barrel_rate = contact.barrel_rate if contact else None
        return weighted_average([
            (normalize_to_range(metrics.avg_bat_speed, cal.bat_speed_range_mph), OVERALL_SCORE_WEIGHTS["bat_speed"]),
            (metrics.avg_sequence_score, OVERALL_SCORE_WEIGHTS["sequence"]),
            (metrics.consistency_score, OVERALL_SCORE_WEIGHTS["consistency"]),
            (normalize_to_range(avg_ev, cal.exit_velocity_range_mph), OVERALL_SCORE_WEIGHTS["exit_velocity"]),
            (barrel_rate * 100.0 if barrel_rate is not None else None, OVERALL_SCORE_WEIGHTS["barrel_rate"]),
        ])

    # ----- strengths & weaknesses -----

    def _rule_values(
        self,
        metrics: SessionMetrics,
        categories: Dict[str, CategoryScore],
        contact: Optional[ContactQualitySummary],
    ) -> Dict[str, Optional[float]]:
        barrel_rate = contact.barrel_rate if contact else None
        return {
            "avg_bat_speed": metrics.avg_bat_speed,
            "avg_sequence_score": metrics.avg_sequence_score,
            "consistency_score": metrics.consistency_score,
            "barrel_rate": barrel_rate * 100.0 if barrel_rate is not None else None,
            "anchor": categories["anchor"].score,
            "engine": categories["engine"].score,
            "whip": categories["whip"].score,
        }

    def identify_strengths_and_weaknesses(
        self,
        metrics: SessionMetrics,
        categories: Dict[str, CategoryScore],
        contact: Optional[ContactQualitySummary],
    ) -> Tuple[List[ReportEntry], List[ReportEntry]]:
        strengths: List[ReportEntry] = []
        weaknesses: List[ReportEntry] = []

        for key, value in self._rule_values(metrics, categories, contact).items():
            if value is None:
                continue
            rule = STRENGTH_WEAKNESS_RULES[key]
            if value >= rule.strength_at:
                strengths.append(ReportEntry(area=rule.area, description=STRENGTH_TEXT[key].format(value=value)))
            elif value < rule.weakness_below:
                weaknesses.append(ReportEntry(
                    area=rule.area,
                    description=WEAKNESS_TEXT[key].format(value=value),
                    priority=rule.priority,
                ))

        return strengths, weaknesses

    # ----- narrative -----

    def build_summary(
        self,
        metrics: SessionMetrics,
        contact: Optional[ContactQualitySummary],
        overall: Optional[float],
        swings_analyzed: int,
    ) -> str:
        tier = get_performance_tier(overall)
        lines = [
            f"Overall Assessment: {tier} ({_fmt(overall)}/100)",
            "",
            f"This assessment analyzed {swings_analyzed} swings with biomechanical and ball flight data.",
            "",
        ]
        if metrics.avg_bat_speed is not None:
            lines.append(
                f"Bat Speed: {_fmt(metrics.avg_bat_speed)} mph (avg), {_fmt(metrics.max_bat_speed)} mph (max)"
            )
        if metrics.avg_sequence_score is not None:
            score = metrics.avg_sequence_score
            verdict = "Excellent" if score >= 80 else "Good" if score >= 60 else "Needs work"
            lines.append(f"Kinematic Sequence: {_fmt(score)}/100 - {verdict}")
        if contact is not None and contact.total_events:
            barrel_pct = contact.barrel_rate * 100.0 if contact.barrel_rate is not None else None
            lines += [
                "",
                "Ball Contact:",
                f"- Exit Velocity: {_fmt(contact.avg_ev)} mph (avg), {_fmt(contact.max_ev)} mph (max)",
                f"- Barrel Rate: {_fmt(barrel_pct)}%",
                f"- Launch Angle: {_fmt(contact.avg_la)} deg (avg), SD {_fmt(contact.sd_la)} deg",
            ]
        return "\n".join(lines).strip()

    def build_sections(
        self,
        report: AssessmentReport,
        comparison: Optional[ComparisonSummary],
    ) -> Dict[str, str]:
        metrics = report.metrics
        contact = report.contact_quality

        executive = [
            f"**Overall Performance: {_fmt(report.overall_score, 0)}/100** ({get_score_grade(report.overall_score)})",
            "",
            f"This assessment evaluated swing mechanics through {report.swings_analyzed} swings, "
            "analyzing motion, stability, and kinematic sequencing patterns.",
            "",
            "**Key Scores (Anchor -> Engine -> Whip):**",
            f"- Anchor (Lower Body Foundation): {_fmt(report.anchor.score, 0)}/100",
            f"- Engine (Core Rotation): {_fmt(report.engine.score, 0)}/100",
            f"- Whip (Bat Speed & Path): {_fmt(report.whip.score, 0)}/100",
        ]
        if comparison is not None:
            executive += ["", "## Change Since Last Assessment", "", comparison.narrative_summary]

        bat_speed = metrics.avg_bat_speed
        if bat_speed is not None and bat_speed >= 70:
            motion_verdict = "Strong rotational power and velocity generation."
        elif bat_speed is not None and bat_speed >= 60:
            motion_verdict = "Moderate velocity output with room for improvement."
        else:
            motion_verdict = "Focus needed on explosive power development."
        motion = [
            "**Velocities & Power Output:**",
            f"- Bat Speed: {_fmt(bat_speed)} mph (max {_fmt(metrics.max_bat_speed)} mph)",
            f"- Hand Speed: {_fmt(metrics.avg_hand_speed)} mph",
            f"- Pelvis Angular Velocity: {_fmt(metrics.avg_pelvis_velocity, 0)} deg/s",
            f"- Torso Angular Velocity: {_fmt(metrics.avg_torso_velocity, 0)} deg/s",
            f"- Load to Launch: {_fmt(metrics.avg_load_to_launch, 0)} ms",
            "",
            f"**Assessment:** {motion_verdict}",
        ]
        if contact is not None and contact.avg_ev is not None:
            motion += ["", f"**Ball Flight:** Average exit velocity {_fmt(contact.avg_ev)} mph"]

        head = metrics.head_stability_score
        if head is not None and head >= 80:
            stability_verdict = "Excellent postural control and repeatability."
        elif head is not None and head >= 60:
            stability_verdict = "Good stability with some variability in key positions."
        else:
            stability_verdict = "Significant movement patterns need stabilization work."
        stability = [
            "**Postural Control & Consistency:**",
            f"- Head Stability: {_fmt(head, 0)}/100",
            f"- Spine Tilt Consistency: {_fmt(metrics.spine_tilt_consistency_score, 0)}/100",
            f"- Overall Stability: {_fmt(metrics.overall_stability_score, 0)}/100",
            "",
            "**Key Positions:**",
            f"- Hip-Shoulder Separation: {_fmt(metrics.avg_x_factor)} deg",
            f"- Front Knee Angle: {_fmt(metrics.avg_front_knee_angle)} deg",
            f"- Head Displacement: {_fmt(metrics.avg_head_displacement)} cm",
            "",
            f"**Assessment:** {stability_verdict}",
        ]

        sequence = metrics.avg_sequence_score
        if sequence is not None and sequence >= 80:
            sequence_verdict = "Elite proximal-to-distal energy transfer. Minimal efficiency losses."
        elif sequence is not None and sequence >= 65:
            sequence_verdict = "Good sequencing with timing gaps requiring refinement."
        else:
            sequence_verdict = "Kinematic chain shows significant timing issues. Focus on ground-up connection."
        order = metrics.avg_sequence_order_score
        if order is not None and order >= 80:
            order_note = "Athlete demonstrates proper pelvis -> torso -> arms -> bat progression."
        else:
            order_note = "Athlete shows out-of-sequence firing patterns reducing power output."
        sequencing = [
            "**Kinematic Chain Analysis:**",
            f"- Sequence Score: {_fmt(sequence, 0)}/100",
            f"- Correct Order: {_fmt(order, 0)}%",
            f"- Pelvis->Torso Gap: {_fmt(metrics.avg_pelvis_to_torso_gap, 0)}ms (ideal: 30-50ms)",
            f"- Torso->Arm Gap: {_fmt(metrics.avg_torso_to_arm_gap, 0)}ms",
            f"- Arm->Bat Gap: {_fmt(metrics.avg_arm_to_bat_gap, 0)}ms",
            "",
            f"**Assessment:** {sequence_verdict}",
            "",
            f"**Sequence Order:** {order_note}",
        ]

        return {
            "executive_summary": "\n".join(executive).strip(),
            "motion_summary": "\n".join(motion).strip(),
            "stability_summary": "\n".join(stability).strip(),
            "sequencing_summary": "\n".join(sequencing).strip(),
            "body_plan": self.build_body_plan(report),
        }

    def build_body_plan(self, report: AssessmentReport) -> str:
        metrics = report.metrics
        contact = report.contact_quality

        lines = ["**Movement Priorities:**", ""]
        if report.weaknesses:
            for i, weakness in enumerate(report.weaknesses[:3], start=1):
                lines.append(f"{i}. **{weakness.area}** ({weakness.priority or 'medium'} priority)")
                lines.append(f"   {weakness.description}")
        else:
            lines.append("- Continue current training approach")

        lines += ["", "**Leverage Strengths:**"]
        if report.strengths:
            lines += [f"- **{strength.area}:** {strength.description}" for strength in report.strengths[:2]]
        else:
            lines.append("- Build on current skill foundation")

        drills = []
        if metrics.avg_sequence_score is not None and metrics.avg_sequence_score < 70:
            drills.append("- Kinematic sequence drills (med ball rotations, separation drills)")
        if metrics.avg_bat_speed is not None and metrics.avg_bat_speed < 65:
            drills.append("- Bat speed development (overload/underload, plyometrics)")
        if metrics.head_stability_score is not None and metrics.head_stability_score < 70:
            drills.append("- Head/posture stability work (vision tracking, balance drills)")
        if contact is not None and contact.barrel_rate is not None and contact.barrel_rate < 0.40:
            drills.append("- Barrel efficiency drills (tee work, path optimization)")
        if drills:
            lines += ["", "**Drills & Training Focus:**"] + drills

        return "\n".join(lines).strip()

    # ----- orchestration -----

    def build_report(
        self,
        session: AssessmentSession,
        swing_metrics: List[SwingMetrics],
        swings_excluded: int = 0,
    ) -> AssessmentReport:
        """Assemble a report from already-analyzed swings, without comparison or persistence"""
        contact = None
        if session.ball_events:
            contact = compute_contact_quality_summary(session.ball_events, session.level)

        metrics = self.aggregate_metrics(swing_metrics)
        categories = self.category_scores(swing_metrics)
        metrics.overall_stability_score = average_terms(
            category.stability for category in categories.values()
        )

        overall = self.overall_score(metrics, contact)
        tier = get_performance_tier(overall)
        strengths, weaknesses = self.identify_strengths_and_weaknesses(metrics, categories, contact)

        return AssessmentReport(
            session_id=session.session_id,
            athlete_id=session.athlete_id,
            session_created_at=session.created_at,
            config_version=SCORING_CONFIG_VERSION,
            swings_analyzed=len(swing_metrics),
            swings_excluded=swings_excluded,
            overall_score=overall,
            tier=tier,
            anchor=categories["anchor"],
            engine=categories["engine"],
            whip=categories["whip"],
            metrics=metrics,
            contact_quality=contact,
            strengths=strengths,
            weaknesses=weaknesses,
            summary=self.build_summary(metrics, contact, overall, len(swing_metrics)),
            score_explanation=SCORE_EXPLANATIONS[tier],
        )

    def generate(self, session: AssessmentSession, store: AssessmentStore) -> AssessmentReport:
        if not session.swings:
            raise EmptySessionError(f"Session {session.session_id} has no swings")

        with self.perf.timed(f"report generation for session {session.session_id}") as details:
            swing_metrics, excluded = self.analyze_swings(session.swings)
            if not swing_metrics:
                self.logger.warning(f"Session {session.session_id}: every swing was excluded")
            report = self.build_report(session, swing_metrics, excluded)

            comparison = None
            previous = find_previous_session(session, store)
            if previous is not None:
                previous_session, previous_report = previous
                comparison = compare_reports(report, previous_report, previous_session)
                report.previous_session_id = previous_session.session_id
                report.comparison = comparison
                self.logger.info(
                    f"Compared with previous session {previous_session.session_id}: {comparison.overall_trend}"
                )
            else:
                self.logger.info(f"No previous assessment found for athlete {session.athlete_id}")

            for name, text in self.build_sections(report, comparison).items():
                setattr(report, name, text)

            if not store.save_report(report):
                self.logger.error(f"Failed to persist report for session {session.session_id}")

            details["overall_score"] = _fmt(report.overall_score)
            details["tier"] = report.tier

        self.perf.metric("swings_analyzed", len(swing_metrics))
        return report


STRENGTH_TEXT: Dict[str, str] = {
    "avg_bat_speed": "Strong bat speed averaging {value:.1f} mph, indicating good rotational power and hand speed.",
    "avg_sequence_score": "Excellent proximal-to-distal sequencing ({value:.1f}/100), showing efficient energy transfer from pelvis to torso to arms to bat.",
    "consistency_score": "High swing consistency ({value:.1f}/100), demonstrating repeatable mechanics.",
    "barrel_rate": "Strong barrel rate of {value:.1f}%, indicating elite bat-to-ball skills and swing decisions.",
    "anchor": "Solid lower-body foundation ({value:.0f}/100) with repeatable load and stride.",
    "engine": "Efficient core rotation ({value:.0f}/100) with good hip-shoulder separation.",
    "whip": "Quick, well-timed bat delivery ({value:.0f}/100).",
}

WEAKNESS_TEXT: Dict[str, str] = {
    "avg_bat_speed": "Below-average bat speed ({value:.1f} mph). Focus on rotational power development and hand speed drills.",
    "avg_sequence_score": "Inefficient movement sequence ({value:.1f}/100). Work on pelvis-first rotation and timing between body segments.",
    "consistency_score": "High variability in swing metrics ({value:.1f}/100). Increase repetitions and focus on repeatable positions.",
    "barrel_rate": "Low barrel rate ({value:.1f}%). Work on bat path efficiency and pitch recognition.",
    "anchor": "Lower-body foundation needs work ({value:.0f}/100). Focus on load timing, knee bracing and stride consistency.",
    "engine": "Core rotation is limiting power ({value:.0f}/100). Work on hip-shoulder separation and pelvis-to-torso timing.",
    "whip": "Upper-body delivery is out of sync ({value:.0f}/100). Work on arm-to-bat timing and connection at impact.",
}


# Shared generator instance
report_generator = ReportGenerator()


def generate_assessment_report(session: AssessmentSession, store: AssessmentStore) -> AssessmentReport:
    """
    Analyze a session's swings, aggregate them with its ball data, compare with
    the athlete's previous assessment and upsert the report

    Raises:
        EmptySessionError: the session has no swings
    """
    return report_generator.generate(session, store)


def process_session(session_id: str, store: AssessmentStore) -> AssessmentReport:
    """
    Generate the report for a stored session, moving it through
    processing -> completed, or -> failed when generation raises

    Raises:
        SessionNotFoundError: no stored session with this id
        EmptySessionError: the session has no swings
    """
    session = store.get_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)

    session.status = SessionStatus.PROCESSING
    store.save_session(session)

    try:
        report = generate_assessment_report(session, store)
    except AssessmentError:
        session.status = SessionStatus.FAILED
        store.save_session(session)
        raise
    except Exception as e:
        logger.error(f"Unexpected error generating report for session {session_id}: {str(e)}")
        session.status = SessionStatus.FAILED
        store.save_session(session)
        raise

    session.status = SessionStatus.COMPLETED
    store.save_session(session)
    return report
