"""
Kinematic sequence analysis: segment angular velocities, peaks and firing order
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from barrels.models.pose import Handedness, Keypoint, KeypointIndex, SkeletonFrame, side_index
from barrels.utils.logger import get_logger
from barrels.utils.scoring_configs import SEQUENCE_CALIBRATION

logger = get_logger(__name__)

SEGMENTS: Tuple[str, ...] = SEQUENCE_CALIBRATION.canonical_order
GAP_NAMES: Tuple[str, ...] = ("pelvis_to_torso", "torso_to_arm", "arm_to_bat")


@dataclass
class SegmentPeak:
    peak_velocity: float    # deg/s
    peak_frame: int
    timing_ms: float        # positive = before impact


@dataclass
class KinematicSequenceResult:
    segments: Dict[str, SegmentPeak]
    order: List[str]
    gaps: Dict[str, float]
    gap_scores: Dict[str, float]
    order_points: float
    timing_points: float
    score: float
    angular_velocities: Dict[str, List[float]] = field(default_factory=dict)

    @property
    def is_canonical_order(self) -> bool:
        return tuple(self.order) == SEGMENTS


def _segment_angle(start: Optional[Keypoint], end: Optional[Keypoint], depth: Optional[bool] = None) -> Optional[float]:
    """
    Segment orientation in radians.

    depth selects the x-z plane (True) or the x-y image plane (False); None picks
    the depth plane when both points carry z. A depth angle needs z on both points.
    """
    if start is None or end is None:
        return None
    has_z = start.z is not None and end.z is not None
    if depth is None:
        depth = has_z
    dx = end.x - start.x
    if depth:
        if not has_z:
            return None
        return math.atan2(end.z - start.z, dx)
    return math.atan2(end.y - start.y, dx)


def segment_endpoints(
    frame: SkeletonFrame,
    segment: str,
    handedness: Handedness = Handedness.RIGHT,
    use_bat: bool = True,
) -> Tuple[Optional[Keypoint], Optional[Keypoint]]:
    """Start and end points of a named segment; the bat uses the lead forearm when use_bat is False"""
    if segment == "pelvis":
        return frame.get(KeypointIndex.LEFT_HIP), frame.get(KeypointIndex.RIGHT_HIP)
    if segment == "torso":
        return frame.get(KeypointIndex.LEFT_SHOULDER), frame.get(KeypointIndex.RIGHT_SHOULDER)
    if segment == "bat" and use_bat:
        if frame.bat is None:
            return None, None
        return frame.bat.knob, frame.bat.tip
    if segment in ("arm", "bat"):
        return frame.get(side_index(handedness, "elbow")), frame.get(side_index(handedness, "wrist"))
    raise ValueError(f"Unknown segment: {segment}")


def segment_angle(frame: SkeletonFrame, segment: str, handedness: Handedness = Handedness.RIGHT) -> Optional[float]:
    """Angle of a named segment in one frame, in radians"""
    start, end = segment_endpoints(frame, segment, handedness, use_bat=frame.bat is not None)
    return _segment_angle(start, end)


def segment_angle_series(
    frames: List[SkeletonFrame],
    segment: str,
    handedness: Handedness = Handedness.RIGHT,
) -> Optional[np.ndarray]:
    """
    Unwrapped per-frame angle series in degrees.

    The source and the plane are fixed for the whole swing: the bat is measured
    from its tracked knob and tip when any frame has them, otherwise from the
    lead forearm, and the depth plane is used only when every usable frame
    carries z. Frames where the chosen segment is not visible hold the last
    valid angle (the first valid angle for a leading gap). Returns None when no
    frame is usable.
    """
    use_bat = any(frame.bat is not None for frame in frames)
    endpoints = [segment_endpoints(frame, segment, handedness, use_bat) for frame in frames]
    usable = [(start, end) for start, end in endpoints if start is not None and end is not None]
    if not usable:
        return None
    depth = all(start.z is not None and end.z is not None for start, end in usable)

    raw = [_segment_angle(start, end, depth) for start, end in endpoints]
    first_valid = next(angle for angle in raw if angle is not None)

    filled = []
    last = first_valid
    for angle in raw:
        if angle is not None:
            last = angle
        filled.append(last)

    return np.degrees(np.unwrap(np.asarray(filled, dtype=float)))


def angular_velocity(angles: np.ndarray, fps: float) -> np.ndarray:
    """
    Central-difference angular speed in deg/s.

    The two boundary samples repeat their nearest interior neighbour.
    """
    n = len(angles)
    if n < 3:
        return np.zeros(n)

    velocities = np.empty(n)
    velocities[1:-1] = np.abs(angles[2:] - angles[:-2]) / (2.0 / fps)
    velocities[0] = velocities[1]
    velocities[-1] = velocities[-2]
    return velocities


def find_peak(velocities: np.ndarray) -> Tuple[float, int]:
    """Peak value and the first frame reaching it"""
    if len(velocities) == 0:
        return 0.0, 0
    peak_frame = int(np.argmax(velocities))
    return float(velocities[peak_frame]), peak_frame


def peak_timing_ms(impact_frame: int, peak_frame: int, fps: float) -> float:
    """Milliseconds between peak and impact; positive when the peak comes first"""
    return (impact_frame - peak_frame) * 1000.0 / fps


def firing_order(timings: Dict[str, float]) -> List[str]:
    """Segments from earliest to latest peak; ties keep the canonical order"""
    return sorted(SEGMENTS, key=lambda segment: timings[segment], reverse=True)


def score_timing_gap(gap_ms: float) -> float:
    """Triangular score around the ideal inter-segment gap"""
    calibration = SEQUENCE_CALIBRATION
    deviation = abs(gap_ms - calibration.ideal_gap_ms)
    if deviation <= calibration.gap_tolerance_ms:
        return 100.0
    return max(0.0, 100.0 - (deviation - calibration.gap_tolerance_ms) * calibration.gap_decay_per_ms)


def score_order(order: List[str]) -> float:
    """Full points for the canonical order, otherwise partial credit per correct slot"""
    calibration = SEQUENCE_CALIBRATION
    if tuple(order) == SEGMENTS:
        return calibration.order_points
    correct = sum(1 for observed, expected in zip(order, SEGMENTS) if observed == expected)
    return correct * calibration.order_points / len(SEGMENTS)


def segment_gaps(timings: Dict[str, float]) -> Dict[str, float]:
    """Absolute timing gaps between adjacent segments of the canonical chain"""
    return {
        name: abs(timings[first] - timings[second])
        for name, first, second in zip(GAP_NAMES, SEGMENTS, SEGMENTS[1:])
    }


def score_sequence(timings: Dict[str, float]) -> Tuple[float, float, float, List[str], Dict[str, float], Dict[str, float]]:
    """
    Score a set of segment peak timings.

    Returns (score, order_points, timing_points, order, gaps, gap_scores).
    """
    calibration = SEQUENCE_CALIBRATION
    order = firing_order(timings)
    order_points = score_order(order)

    gaps = segment_gaps(timings)
    gap_scores = {name: score_timing_gap(gap) for name, gap in gaps.items()}
    points_per_gap = calibration.timing_points / len(GAP_NAMES)
    timing_points = sum(gap_score / 100.0 * points_per_gap for gap_score in gap_scores.values())

    score = min(100.0, max(0.0, order_points + timing_points))
    return score, order_points, timing_points, order, gaps, gap_scores


def calculate_kinematic_sequence(
    frames: List[SkeletonFrame],
    impact_frame: int,
    fps: float,
    handedness: Handedness = Handedness.RIGHT,
) -> Optional[KinematicSequenceResult]:
    """
    Full kinematic sequence for one swing.

    Returns None when any of the four segments has no usable frame.
    """
    segments: Dict[str, SegmentPeak] = {}
    velocities: Dict[str, List[float]] = {}

    for segment in SEGMENTS:
        angles = segment_angle_series(frames, segment, handedness)
        if angles is None:
            logger.warning(f"Kinematic sequence unavailable: no usable frames for {segment}")
            return None
        segment_velocity = angular_velocity(angles, fps)
        peak_velocity, peak_frame = find_peak(segment_velocity)
        segments[segment] = SegmentPeak(
            peak_velocity=peak_velocity,
            peak_frame=peak_frame,
            timing_ms=peak_timing_ms(impact_frame, peak_frame, fps),
        )
        velocities[segment] = segment_velocity.tolist()

    timings = {segment: peak.timing_ms for segment, peak in segments.items()}
    score, order_points, timing_points, order, gaps, gap_scores = score_sequence(timings)

    return KinematicSequenceResult(
        segments=segments,
        order=order,
        gaps=gaps,
        gap_scores=gap_scores,
        order_points=order_points,
        timing_points=timing_points,
        score=score,
        angular_velocities=velocities,
    )
