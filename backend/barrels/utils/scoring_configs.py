"""
Calibration tables and scoring constants for swing assessment

Every constant the analyzers and report generator score against lives here, so
recalibrating a threshold never touches algorithm code. Tables are immutable;
bump SCORING_CONFIG_VERSION whenever a value changes so stored reports can be
traced back to the calibration that produced them.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from barrels.config.base import settings

SCORING_CONFIG_VERSION = "2024.11"


@dataclass(frozen=True)
class AngleWindowStep:
    """Launch-angle window for exit velocities below ev_below (None = open-ended)"""
    ev_below: Optional[float]
    min_angle: float
    max_angle: float


@dataclass(frozen=True)
class DeviationTerm:
    """Score of 100 at the ideal value, losing `slope` points per unit of deviation"""
    ideal: float
    slope: float


# ===== BARRELS =====

# Minimum exit velocity on the canonical (pro) scale
CANONICAL_EV_MIN: float = 98.0
DEFAULT_LEVEL_EV_MIN: float = 85.0

LEVEL_EV_THRESHOLDS: Mapping[str, float] = MappingProxyType({
    "pro": 98.0,
    "mlb": 98.0,
    "college": 92.0,
    "hs": 92.0,
    "high_school": 92.0,
    "youth": 85.0,
})

# Statcast-style windows, widening as exit velocity grows
BARREL_ANGLE_TABLE: Tuple[AngleWindowStep, ...] = (
    AngleWindowStep(99.0, 26.0, 30.0),
    AngleWindowStep(100.0, 25.0, 31.0),
    AngleWindowStep(101.0, 24.0, 33.0),
    AngleWindowStep(103.0, 23.0, 35.0),
    AngleWindowStep(105.0, 22.0, 37.0),
    AngleWindowStep(107.0, 21.0, 39.0),
    AngleWindowStep(109.0, 20.0, 41.0),
    AngleWindowStep(111.0, 19.0, 43.0),
    AngleWindowStep(113.0, 18.0, 45.0),
    AngleWindowStep(115.0, 16.0, 48.0),
    AngleWindowStep(None, 8.0, 50.0),
)

# HitTrax strike-zone cells counted as "in zone"
IN_ZONE_CELLS: Tuple[int, ...] = (4, 5, 6, 7, 8, 9, 10, 11, 12)


# ===== PER-SWING ANALYSIS =====

@dataclass(frozen=True)
class SwingCalibration:
    bat_speed_window_frames: int = 5
    impact_speed_frames: int = 3
    # Keypoint units per second -> mph
    speed_to_mph: float = 0.682
    load_lead_in_frames: int = 5
    launch_offset_frames: int = 10
    # Normalized frame height expressed in centimeters
    frame_height_cm: float = 180.0
    inches_to_cm: float = 2.54
    bat_speed_range_mph: Tuple[float, float] = (60.0, 80.0)
    swing_duration: DeviationTerm = DeviationTerm(ideal=500.0, slope=0.2)
    x_factor: DeviationTerm = DeviationTerm(ideal=50.0, slope=2.0)
    sequence_weight: float = 0.40
    bat_speed_weight: float = 0.30
    duration_weight: float = 0.15
    x_factor_weight: float = 0.15


@dataclass(frozen=True)
class SequenceCalibration:
    canonical_order: Tuple[str, ...] = ("pelvis", "torso", "arm", "bat")
    ideal_gap_ms: float = 40.0
    gap_tolerance_ms: float = 10.0
    gap_decay_per_ms: float = 2.0
    order_points: float = 50.0
    timing_points: float = 50.0


SWING_CALIBRATION = SwingCalibration()
SEQUENCE_CALIBRATION = SequenceCalibration()


# ===== SESSION REPORT =====

@dataclass(frozen=True)
class ReportCalibration:
    consistency_sd_multiplier: float = 2.0
    stride_sd_multiplier: float = 200.0
    order_score_multiplier: float = 1.2

    load_to_launch: DeviationTerm = DeviationTerm(ideal=185.0, slope=1 / 1.5)
    pelvis_peak: DeviationTerm = DeviationTerm(ideal=110.0, slope=0.5)
    torso_peak: DeviationTerm = DeviationTerm(ideal=70.0, slope=0.5)
    bat_peak: DeviationTerm = DeviationTerm(ideal=0.0, slope=0.5)
    segment_gap_motion: DeviationTerm = DeviationTerm(ideal=40.0, slope=1 / 1.5)
    segment_gap_sequencing: DeviationTerm = DeviationTerm(ideal=40.0, slope=2.0)
    x_factor: DeviationTerm = DeviationTerm(ideal=50.0, slope=2.0)

    # (motion, stability, sequencing)
    anchor_weights: Tuple[float, float, float] = (0.4, 0.4, 0.2)
    engine_weights: Tuple[float, float, float] = (0.4, 0.4, 0.2)
    whip_weights: Tuple[float, float, float] = (0.4, 0.3, 0.3)

    bat_speed_range_mph: Tuple[float, float] = (60.0, 80.0)
    exit_velocity_range_mph: Tuple[float, float] = (70.0, 95.0)


REPORT_CALIBRATION = ReportCalibration()

OVERALL_SCORE_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "bat_speed": 0.25,
    "sequence": 0.25,
    "consistency": 0.15,
    "exit_velocity": 0.20,
    "barrel_rate": 0.15,
})


@dataclass(frozen=True)
class ThresholdRule:
    """Strength when value >= strength_at, weakness when value < weakness_below"""
    area: str
    strength_at: float
    weakness_below: float
    priority: str


STRENGTH_WEAKNESS_RULES: Mapping[str, ThresholdRule] = MappingProxyType({
    "avg_bat_speed": ThresholdRule("Bat Speed", 75.0, 70.0, "high"),
    "avg_sequence_score": ThresholdRule("Kinematic Sequence", 75.0, 60.0, "high"),
    "consistency_score": ThresholdRule("Consistency", 75.0, 60.0, "medium"),
    "barrel_rate": ThresholdRule("Barrel Contact", 50.0, 30.0, "high"),
    "anchor": ThresholdRule("Anchor (Lower Body)", 80.0, 50.0, "medium"),
    "engine": ThresholdRule("Engine (Core Rotation)", 80.0, 50.0, "medium"),
    "whip": ThresholdRule("Whip (Upper Body & Bat)", 80.0, 50.0, "medium"),
})

# (minimum score, label), checked top-down
PERFORMANCE_TIERS: Tuple[Tuple[float, str], ...] = (
    (85.0, "Elite"),
    (70.0, "Advanced"),
    (55.0, "Intermediate"),
    (float("-inf"), "Developing"),
)

SCORE_GRADES: Tuple[Tuple[float, str], ...] = (
    (90.0, "Elite"),
    (80.0, "Advanced"),
    (70.0, "Proficient"),
    (60.0, "Developing"),
    (float("-inf"), "Needs Work"),
)

SCORE_EXPLANATIONS: Mapping[str, str] = MappingProxyType({
    "Elite": "Elite-level mechanics with excellent kinematic sequencing and consistent ball contact. Minimal mechanical adjustments needed.",
    "Advanced": "Advanced mechanics with good fundamentals. Some refinement opportunities exist in timing and consistency.",
    "Intermediate": "Intermediate mechanics with solid foundation. Focus on improving kinematic sequence timing and bat speed development.",
    "Developing": "Developing mechanics. Prioritize fundamental movement patterns and consistent practice of key drills.",
})


# ===== SESSION COMPARISON =====

@dataclass(frozen=True)
class ComparisonMetric:
    key: str
    label: str
    threshold: float


COMPARISON_METRICS: Tuple[ComparisonMetric, ...] = (
    ComparisonMetric("overall_score", "Overall Score", 2.0),
    ComparisonMetric("anchor_score", "Anchor (Lower Body)", 2.0),
    ComparisonMetric("engine_score", "Engine (Core Rotation)", 2.0),
    ComparisonMetric("whip_score", "Whip (Bat Speed)", 2.0),
    ComparisonMetric("avg_bat_speed", "Bat Speed", 1.0),
    ComparisonMetric("head_stability_score", "Head Stability", 2.0),
    ComparisonMetric("overall_stability_score", "Overall Stability", 2.0),
    ComparisonMetric("avg_sequence_score", "Kinematic Sequence", 2.0),
    ComparisonMetric("avg_exit_velocity", "Exit Velocity", 1.0),
    ComparisonMetric("barrel_rate", "Barrel Rate", 2.0),
)


def normalize_level(level: Optional[str]) -> str:
    """
    Map free-form competition level text onto a known level key.

    An empty level falls back to settings.DEFAULT_LEVEL.
    """
    level = level or settings.DEFAULT_LEVEL
    normalized = level.strip().lower().replace("-", "_").replace(" ", "_")
    if normalized in LEVEL_EV_THRESHOLDS:
        return normalized
    if "youth" in normalized:
        return "youth"
    if "college" in normalized:
        return "college"
    if "pro" in normalized or "mlb" in normalized:
        return "pro"
    if "high" in normalized and "school" in normalized:
        return "hs"
    return normalized


def get_level_ev_min(level: Optional[str]) -> float:
    """Get the minimum exit velocity for barrel consideration at a level"""
    return LEVEL_EV_THRESHOLDS.get(normalize_level(level), DEFAULT_LEVEL_EV_MIN)


def deviation_score(value: Optional[float], term: DeviationTerm) -> Optional[float]:
    """Score a value by its distance from the ideal, floored at 0"""
    if value is None:
        return None
    return max(0.0, 100.0 - abs(value - term.ideal) * term.slope)


def normalize_to_range(value: Optional[float], value_range: Tuple[float, float]) -> Optional[float]:
    """Linear 0-100 score between the bounds of value_range, clamped"""
    if value is None:
        return None
    low, high = value_range
    return min(100.0, max(0.0, (value - low) / (high - low) * 100.0))


def weighted_average(components: Iterable[Tuple[Optional[float], float]]) -> Optional[float]:
    """
    Weighted mean over (value, weight) pairs, skipping unavailable values.

    Weights are re-normalized over what remains, so a missing input never drags
    the result towards zero. None when nothing is available.
    """
    available = [
        (value, weight) for value, weight in components
        if value is not None and math.isfinite(value)
    ]
    total_weight = sum(weight for _, weight in available)
    if not available or total_weight <= 0:
        return None
    return sum(value * weight for value, weight in available) / total_weight


def get_performance_tier(score: Optional[float]) -> str:
    """Get tier label for an overall score"""
    if score is None:
        return "Developing"
    for minimum, label in PERFORMANCE_TIERS:
        if score >= minimum:
            return label
    return PERFORMANCE_TIERS[-1][1]


def get_score_grade(score: Optional[float]) -> str:
    """Get the finer-grained grade used in the executive summary"""
    if score is None:
        return "Unavailable"
    for minimum, label in SCORE_GRADES:
        if score >= minimum:
            return label
    return SCORE_GRADES[-1][1]

