"""
Per-swing metric aggregation: timing, stability, motion and sequencing for one swing
"""

import math
from typing import Any, List, Optional

import numpy as np

from barrels.analyzers.base_analyzer import BaseAnalyzer
from barrels.analyzers.joint_geometry import (
    arm_angle,
    bat_speed,
    hip_rotation,
    leg_angle,
    line_angle,
    midpoint,
    wrap_degrees,
)
from barrels.analyzers.kinematic_sequence import calculate_kinematic_sequence
from barrels.models.metrics import SwingMetrics
from barrels.models.pose import Keypoint, KeypointIndex, SkeletonFrame, Swing, side_index
from barrels.utils.errors import MissingDataError
from barrels.utils.logger import get_logger
from barrels.utils.scoring_configs import (
    SWING_CALIBRATION,
    deviation_score,
    normalize_to_range,
    weighted_average,
)

logger = get_logger(__name__)


def _distance(p1: Optional[Keypoint], p2: Optional[Keypoint]) -> Optional[float]:
    if p1 is None or p2 is None:
        return None
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def detect_load_frame(frames: List[SkeletonFrame]) -> Optional[int]:
    """
    Start of the load: the frame where the hips sit lowest, minus a short lead-in.

    Image y grows downward, so the lowest hips have the largest average y.
    """
    lowest_frame = None
    lowest_hip_y = -math.inf
    for i, frame in enumerate(frames):
        hips = [frame.get(KeypointIndex.LEFT_HIP), frame.get(KeypointIndex.RIGHT_HIP)]
        hip_ys = [hip.y for hip in hips if hip is not None]
        if not hip_ys:
            continue
        avg_y = sum(hip_ys) / len(hip_ys)
        if avg_y > lowest_hip_y:
            lowest_hip_y = avg_y
            lowest_frame = i

    if lowest_frame is None:
        return None
    return max(0, lowest_frame - SWING_CALIBRATION.load_lead_in_frames)


def detect_launch_frame(load_frame: int, frame_count: int) -> int:
    return min(frame_count - 1, load_frame + SWING_CALIBRATION.launch_offset_frames)


def spine_tilt(frame: SkeletonFrame) -> Optional[float]:
    """Tilt of the hip-midpoint -> shoulder-midpoint vector from vertical, in degrees"""
    hip_mid = midpoint(frame.get(KeypointIndex.LEFT_HIP), frame.get(KeypointIndex.RIGHT_HIP))
    shoulder_mid = midpoint(frame.get(KeypointIndex.LEFT_SHOULDER), frame.get(KeypointIndex.RIGHT_SHOULDER))
    if hip_mid is None or shoulder_mid is None:
        return None
    dx = shoulder_mid[0] - hip_mid[0]
    dy = shoulder_mid[1] - hip_mid[1]
    return math.degrees(math.atan2(abs(dx), -dy))


def pelvis_angle(frame: SkeletonFrame) -> Optional[float]:
    return line_angle(frame, KeypointIndex.LEFT_HIP, KeypointIndex.RIGHT_HIP)


def shoulder_tilt(frame: SkeletonFrame) -> Optional[float]:
    return line_angle(frame, KeypointIndex.LEFT_SHOULDER, KeypointIndex.RIGHT_SHOULDER)


def hip_shoulder_separation(frames: List[SkeletonFrame], start: int, end: int) -> Optional[float]:
    """X-factor: largest hip-line vs shoulder-line separation in frames[start..end]"""
    separation = None
    for frame in frames[start:end + 1]:
        hips = pelvis_angle(frame)
        shoulders = shoulder_tilt(frame)
        if hips is None or shoulders is None:
            continue
        value = abs(wrap_degrees(shoulders - hips))
        separation = value if separation is None else max(separation, value)
    return separation


def keypoint_confidence(frames: List[SkeletonFrame]) -> Optional[float]:
    """Mean visibility of every keypoint the pose pipeline reported"""
    visibilities = [
        keypoint.visibility
        for frame in frames
        for keypoint in frame.keypoints
        if keypoint is not None
    ]
    if not visibilities:
        return None
    return float(np.mean(visibilities))


class SwingAnalyzer(BaseAnalyzer):
    """Turns one swing's skeleton frames into a flat SwingMetrics record"""

    def __init__(self):
        super().__init__("swing", SWING_CALIBRATION)

    def validate_input(self, swing: Any) -> bool:
        """A swing is analyzable when it has frames and usable keypoints at impact"""
        if not isinstance(swing, Swing) or not swing.frames:
            return False
        return swing.frames[swing.resolved_impact_frame].has_usable_keypoints()

    def analyze(self, swing: Swing) -> SwingMetrics:
        """
        Analyze one swing

        Raises:
            MissingDataError: no frames, no usable keypoints, or an unusable impact frame
        """
        self._check_swing(swing)

        frames = swing.frames
        impact = swing.resolved_impact_frame
        ms_per_frame = swing.ms_per_frame

        metrics = SwingMetrics(swing_id=swing.swing_id, impact_frame=impact)

        load = detect_load_frame(frames)
        launch = detect_launch_frame(load, len(frames)) if load is not None else None
        metrics.load_frame = load
        metrics.launch_frame = launch

        self._add_timing(metrics, load, launch, impact, ms_per_frame)
        self._add_stability(metrics, swing, load, launch, impact)
        self._add_motion(metrics, swing, impact)
        self._add_sequencing(metrics, swing, impact)

        metrics.confidence = keypoint_confidence(frames)
        metrics.overall_score = self._overall_score(metrics)

        logger.info(
            f"Analyzed swing {swing.swing_id or '<unnamed>'}: {len(frames)} frames, "
            f"impact={impact}, load={load}, score={metrics.overall_score}"
        )
        return metrics

    def _check_swing(self, swing: Swing):
        swing_name = swing.swing_id or "<unnamed>"
        if not swing.frames:
            raise MissingDataError(f"Swing {swing_name} has no frames")
        if not any(frame.has_usable_keypoints() for frame in swing.frames):
            raise MissingDataError(f"Swing {swing_name} has no usable keypoints")
        if not swing.frames[swing.resolved_impact_frame].has_usable_keypoints():
            raise MissingDataError(
                f"Swing {swing_name} has no usable keypoints at impact frame {swing.resolved_impact_frame}"
            )

    def _add_timing(
        self,
        metrics: SwingMetrics,
        load: Optional[int],
        launch: Optional[int],
        impact: int,
        ms_per_frame: float,
    ):
        if load is None or launch is None:
            return
        metrics.load_to_launch_ms = (launch - load) * ms_per_frame
        metrics.launch_to_impact_ms = (impact - launch) * ms_per_frame
        metrics.swing_duration_ms = (impact - load) * ms_per_frame

    def _add_stability(
        self,
        metrics: SwingMetrics,
        swing: Swing,
        load: Optional[int],
        launch: Optional[int],
        impact: int,
    ):
        frames = swing.frames
        handedness = swing.handedness
        stance_frame = frames[0]
        impact_frame = frames[impact]

        if launch is not None:
            launch_frame = frames[launch]
            metrics.spine_tilt_at_launch_deg = spine_tilt(launch_frame)
            metrics.pelvis_angle_at_launch_deg = pelvis_angle(launch_frame)
            metrics.shoulder_tilt_at_launch_deg = shoulder_tilt(launch_frame)
            metrics.back_knee_flexion_at_launch_deg = leg_angle(launch_frame, handedness)

            front_ankle = side_index(handedness.opposite, "ankle")
            stride = _distance(stance_frame.get(front_ankle), launch_frame.get(front_ankle))
            if stride is not None:
                height_cm = swing.player_height_in * self.calibration.inches_to_cm
                metrics.stride_length_factor = stride * self.calibration.frame_height_cm / height_cm

        metrics.spine_tilt_at_impact_deg = spine_tilt(impact_frame)
        metrics.pelvis_angle_at_impact_deg = pelvis_angle(impact_frame)
        metrics.shoulder_tilt_at_impact_deg = shoulder_tilt(impact_frame)
        metrics.front_knee_flexion_at_impact_deg = leg_angle(impact_frame, handedness.opposite)
        metrics.lead_elbow_angle_deg = arm_angle(impact_frame, handedness)
        metrics.rear_elbow_angle_deg = arm_angle(impact_frame, handedness.opposite)

        rotation = hip_rotation(frames, impact)
        if rotation.available:
            metrics.hip_rotation_deg = rotation.rotation_angle
            metrics.peak_hip_rotation_deg = rotation.peak_rotation

        start = load if load is not None and load <= impact else 0
        metrics.hip_shoulder_separation_deg = hip_shoulder_separation(frames, start, impact)

        head_shift = _distance(stance_frame.get(KeypointIndex.NOSE), impact_frame.get(KeypointIndex.NOSE))
        if head_shift is not None:
            metrics.head_displacement_cm = head_shift * self.calibration.frame_height_cm

    def _add_motion(self, metrics: SwingMetrics, swing: Swing, impact: int):
        speed = bat_speed(swing.frames, impact, swing.handedness)
        if speed.samples == 0:
            return
        to_mph = self.calibration.speed_to_mph
        metrics.avg_bat_speed_mph = speed.impact_speed * to_mph
        metrics.max_bat_speed_mph = speed.impact_speed * to_mph
        metrics.avg_hand_speed_mph = speed.avg_speed * to_mph
        metrics.max_hand_speed_mph = speed.max_speed * to_mph

    def _add_sequencing(self, metrics: SwingMetrics, swing: Swing, impact: int):
        sequence = calculate_kinematic_sequence(swing.frames, impact, swing.fps, swing.handedness)
        if sequence is None:
            return

        metrics.pelvis_max_angular_velocity = sequence.segments["pelvis"].peak_velocity
        metrics.torso_max_angular_velocity = sequence.segments["torso"].peak_velocity
        metrics.arm_max_angular_velocity = sequence.segments["arm"].peak_velocity
        metrics.bat_max_angular_velocity = sequence.segments["bat"].peak_velocity

        metrics.pelvis_peak_timing_ms = sequence.segments["pelvis"].timing_ms
        metrics.torso_peak_timing_ms = sequence.segments["torso"].timing_ms
        metrics.arm_peak_timing_ms = sequence.segments["arm"].timing_ms
        metrics.bat_peak_timing_ms = sequence.segments["bat"].timing_ms

        metrics.pelvis_to_torso_gap_ms = sequence.gaps["pelvis_to_torso"]
        metrics.torso_to_arm_gap_ms = sequence.gaps["torso_to_arm"]
        metrics.arm_to_bat_gap_ms = sequence.gaps["arm_to_bat"]

        metrics.sequence_order = list(sequence.order)
        # order points are out of 50
        metrics.sequence_order_score = sequence.order_points * 2.0
        metrics.sequence_timing_score = float(np.mean(list(sequence.gap_scores.values())))
        metrics.sequence_score = sequence.score

    def _overall_score(self, metrics: SwingMetrics) -> Optional[float]:
        calibration = self.calibration
        return weighted_average([
            (metrics.sequence_score, calibration.sequence_weight),
            (normalize_to_range(metrics.avg_bat_speed_mph, calibration.bat_speed_range_mph),
             calibration.bat_speed_weight),
            (deviation_score(metrics.swing_duration_ms, calibration.swing_duration), calibration.duration_weight),
            (deviation_score(metrics.hip_shoulder_separation_deg, calibration.x_factor),
             calibration.x_factor_weight),
        ])


# Shared analyzer instance
swing_analyzer = SwingAnalyzer()


def analyze_swing(swing: Swing) -> SwingMetrics:
    """Analyze one swing with the shared analyzer"""
    return swing_analyzer.analyze(swing)
