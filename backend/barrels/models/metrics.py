"""
Per-swing metric models
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SwingMetrics(BaseModel):
    """
    Flat metrics record for one analyzed swing.

    Fields are None when the keypoints they depend on were unavailable; they are
    never backfilled with zero.
    """

    swing_id: Optional[str] = None
    impact_frame: Optional[int] = None
    load_frame: Optional[int] = None
    launch_frame: Optional[int] = None

    # ===== MOTION =====
    avg_bat_speed_mph: Optional[float] = None
    max_bat_speed_mph: Optional[float] = None
    avg_hand_speed_mph: Optional[float] = None
    max_hand_speed_mph: Optional[float] = None
    load_to_launch_ms: Optional[float] = None
    launch_to_impact_ms: Optional[float] = None
    swing_duration_ms: Optional[float] = None
    pelvis_max_angular_velocity: Optional[float] = None
    torso_max_angular_velocity: Optional[float] = None
    arm_max_angular_velocity: Optional[float] = None
    bat_max_angular_velocity: Optional[float] = None

    # ===== STABILITY =====
    spine_tilt_at_launch_deg: Optional[float] = None
    pelvis_angle_at_launch_deg: Optional[float] = None
    shoulder_tilt_at_launch_deg: Optional[float] = None
    back_knee_flexion_at_launch_deg: Optional[float] = None
    spine_tilt_at_impact_deg: Optional[float] = None
    pelvis_angle_at_impact_deg: Optional[float] = None
    shoulder_tilt_at_impact_deg: Optional[float] = None
    front_knee_flexion_at_impact_deg: Optional[float] = None
    hip_rotation_deg: Optional[float] = None
    peak_hip_rotation_deg: Optional[float] = None
    hip_shoulder_separation_deg: Optional[float] = None
    lead_elbow_angle_deg: Optional[float] = None
    rear_elbow_angle_deg: Optional[float] = None
    head_displacement_cm: Optional[float] = None
    stride_length_factor: Optional[float] = None

    # ===== SEQUENCING =====
    pelvis_peak_timing_ms: Optional[float] = None
    torso_peak_timing_ms: Optional[float] = None
    arm_peak_timing_ms: Optional[float] = None
    bat_peak_timing_ms: Optional[float] = None
    pelvis_to_torso_gap_ms: Optional[float] = None
    torso_to_arm_gap_ms: Optional[float] = None
    arm_to_bat_gap_ms: Optional[float] = None
    sequence_order: List[str] = Field(default_factory=list)
    sequence_order_score: Optional[float] = None
    sequence_timing_score: Optional[float] = None
    sequence_score: Optional[float] = None

    # ===== QUALITY =====
    confidence: Optional[float] = None
    overall_score: Optional[float] = None
