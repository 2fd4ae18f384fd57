"""
Assessment session, report and comparison models
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from barrels.models.ball import BattedBallEvent, ContactQualitySummary
from barrels.models.pose import Swing


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AssessmentSession(BaseModel):
    session_id: str
    athlete_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    status: SessionStatus = SessionStatus.PENDING
    level: Optional[str] = None
    session_name: Optional[str] = None
    swings: List[Swing] = Field(default_factory=list)
    ball_events: List[BattedBallEvent] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC so sessions always compare
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ReportEntry(BaseModel):
    """A strength or weakness; weaknesses carry a priority"""
    area: str
    description: str
    priority: Optional[str] = None


class CategoryScore(BaseModel):
    score: Optional[float] = None
    motion: Optional[float] = None
    stability: Optional[float] = None
    sequencing: Optional[float] = None


class FieldAggregate(BaseModel):
    count: int = 0
    mean: Optional[float] = None
    max: Optional[float] = None
    stddev: Optional[float] = None
    consistency: Optional[float] = None


class SessionMetrics(BaseModel):
    """Session-level aggregates of the per-swing metrics"""

    # Motion
    avg_bat_speed: Optional[float] = None
    max_bat_speed: Optional[float] = None
    avg_hand_speed: Optional[float] = None
    max_hand_speed: Optional[float] = None
    avg_load_to_launch: Optional[float] = None
    avg_launch_to_impact: Optional[float] = None
    avg_swing_duration: Optional[float] = None
    avg_pelvis_velocity: Optional[float] = None
    avg_torso_velocity: Optional[float] = None
    avg_arm_velocity: Optional[float] = None
    avg_bat_velocity: Optional[float] = None
    motion_consistency_score: Optional[float] = None

    # Stability
    avg_spine_tilt_at_launch: Optional[float] = None
    avg_pelvis_angle_at_launch: Optional[float] = None
    avg_shoulder_tilt_at_launch: Optional[float] = None
    avg_spine_tilt_at_impact: Optional[float] = None
    avg_pelvis_angle_at_impact: Optional[float] = None
    avg_shoulder_tilt_at_impact: Optional[float] = None
    avg_front_knee_angle: Optional[float] = None
    avg_x_factor: Optional[float] = None
    avg_head_displacement: Optional[float] = None
    avg_stride_length_factor: Optional[float] = None
    spine_tilt_consistency_score: Optional[float] = None
    pelvis_angle_consistency_score: Optional[float] = None
    head_stability_score: Optional[float] = None
    overall_stability_score: Optional[float] = None

    # Sequencing
    avg_pelvis_peak_timing: Optional[float] = None
    avg_torso_peak_timing: Optional[float] = None
    avg_arm_peak_timing: Optional[float] = None
    avg_bat_peak_timing: Optional[float] = None
    avg_pelvis_to_torso_gap: Optional[float] = None
    avg_torso_to_arm_gap: Optional[float] = None
    avg_arm_to_bat_gap: Optional[float] = None
    avg_sequence_score: Optional[float] = None
    avg_sequence_order_score: Optional[float] = None
    avg_sequence_timing_score: Optional[float] = None
    sequence_consistency: Optional[float] = None

    consistency_score: Optional[float] = None
    avg_swing_score: Optional[float] = None

    field_aggregates: Dict[str, FieldAggregate] = Field(default_factory=dict)


class MetricDelta(BaseModel):
    current: Optional[float] = None
    previous: Optional[float] = None
    delta: Optional[float] = None
    percent_change: Optional[float] = None


class ComparisonSummary(BaseModel):
    previous_session_id: str
    previous_assessment_date: Optional[datetime] = None
    days_since_previous: Optional[int] = None
    metrics: Dict[str, MetricDelta] = Field(default_factory=dict)
    improvements: List[str] = Field(default_factory=list)
    declines: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)
    overall_trend: str = "stable"
    narrative_summary: str = ""


class AssessmentReport(BaseModel):
    session_id: str
    athlete_id: str
    session_created_at: Optional[datetime] = None
    generated_at: datetime = Field(default_factory=_utcnow)
    config_version: str = ""

    swings_analyzed: int = 0
    swings_excluded: int = 0

    overall_score: Optional[float] = None
    tier: str = "Developing"
    anchor: CategoryScore = Field(default_factory=CategoryScore)
    engine: CategoryScore = Field(default_factory=CategoryScore)
    whip: CategoryScore = Field(default_factory=CategoryScore)

    metrics: SessionMetrics = Field(default_factory=SessionMetrics)
    contact_quality: Optional[ContactQualitySummary] = None

    strengths: List[ReportEntry] = Field(default_factory=list)
    weaknesses: List[ReportEntry] = Field(default_factory=list)

    summary: str = ""
    score_explanation: str = ""
    executive_summary: str = ""
    motion_summary: str = ""
    stability_summary: str = ""
    sequencing_summary: str = ""
    body_plan: str = ""

    previous_session_id: Optional[str] = None
    comparison: Optional[ComparisonSummary] = None
