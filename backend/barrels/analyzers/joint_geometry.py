"""
Joint geometry and velocity extraction from skeleton frames
"""

import math
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from barrels.models.pose import Handedness, Keypoint, KeypointIndex, SkeletonFrame, side_index
from barrels.utils.scoring_configs import SWING_CALIBRATION

PointLike = Union[Keypoint, Sequence[float]]


class TimedPoint(NamedTuple):
    x: float
    y: float
    timestamp: float


@dataclass
class BatSpeed:
    """Lead-wrist speed proxy around impact, in keypoint units per second"""
    impact_speed: float
    max_speed: float
    avg_speed: float
    samples: int = 0


@dataclass
class HipRotation:
    rotation_angle: float
    peak_rotation: float
    available: bool = False


@dataclass
class ElbowAngles:
    lead_elbow: float
    rear_elbow: float


@dataclass
class SwingBiomechanics:
    bat_speed: BatSpeed
    hip_rotation: HipRotation
    front_knee_angle: float
    elbow_angles: ElbowAngles


def _xy(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Keypoint):
        return point.x, point.y
    return float(point[0]), float(point[1])


def angle_between_three_points(a: PointLike, vertex: PointLike, c: PointLike) -> float:
    """
    Angle at `vertex` between the rays towards `a` and `c`, in degrees [0, 180].

    Zero-length rays have no direction and give 0.
    """
    v1 = np.subtract(_xy(a), _xy(vertex))
    v2 = np.subtract(_xy(c), _xy(vertex))

    norms = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norms == 0:
        return 0.0

    cos_angle = np.dot(v1, v2) / norms
    angle = np.arccos(np.clip(cos_angle, -1.0, 1.0))
    return float(np.degrees(angle))


def velocity(p1: TimedPoint, p2: TimedPoint) -> float:
    """2-D speed between two timestamped points; 0 when no time elapsed"""
    dt = p2.timestamp - p1.timestamp
    if dt == 0:
        return 0.0
    return math.hypot(p2.x - p1.x, p2.y - p1.y) / dt


def midpoint(p1: Optional[Keypoint], p2: Optional[Keypoint]) -> Optional[Tuple[float, float]]:
    if p1 is None or p2 is None:
        return None
    return (p1.x + p2.x) / 2.0, (p1.y + p2.y) / 2.0


def line_angle(frame: Optional[SkeletonFrame], left: KeypointIndex, right: KeypointIndex) -> Optional[float]:
    """Angle of the left->right line from horizontal, in degrees"""
    if frame is None:
        return None
    p_left = frame.get(left)
    p_right = frame.get(right)
    if p_left is None or p_right is None:
        return None
    return math.degrees(math.atan2(p_right.y - p_left.y, p_right.x - p_left.x))


def wrap_degrees(angle: float) -> float:
    """Wrap an angle difference into [-180, 180)"""
    return (angle + 180.0) % 360.0 - 180.0


def joint_angle(
    frame: Optional[SkeletonFrame],
    a: KeypointIndex,
    vertex: KeypointIndex,
    c: KeypointIndex,
) -> Optional[float]:
    """Angle at a joint, or None when any of the three keypoints is unusable"""
    if frame is None:
        return None
    p_a, p_vertex, p_c = frame.get(a), frame.get(vertex), frame.get(c)
    if p_a is None or p_vertex is None or p_c is None:
        return None
    return angle_between_three_points(p_a, p_vertex, p_c)


def leg_angle(frame: Optional[SkeletonFrame], side: Handedness) -> Optional[float]:
    """Hip-knee-ankle angle for one leg"""
    return joint_angle(
        frame,
        side_index(side, "hip"),
        side_index(side, "knee"),
        side_index(side, "ankle"),
    )


def arm_angle(frame: Optional[SkeletonFrame], side: Handedness) -> Optional[float]:
    """Shoulder-elbow-wrist angle for one arm"""
    return joint_angle(
        frame,
        side_index(side, "shoulder"),
        side_index(side, "elbow"),
        side_index(side, "wrist"),
    )


def _frame_at(frames: List[SkeletonFrame], index: int) -> Optional[SkeletonFrame]:
    if 0 <= index < len(frames):
        return frames[index]
    return None


def bat_speed(
    frames: List[SkeletonFrame],
    impact_frame: int,
    handedness: Handedness = Handedness.RIGHT,
) -> BatSpeed:
    """
    Bat speed proxy from the lead-hand wrist around impact.

    Speeds are taken between consecutive frames inside
    [impact - window, impact + window]; the impact speed is the mean of the last
    few of them, at the end of that window rather than at impact itself.
    """
    calibration = SWING_CALIBRATION
    wrist_idx = side_index(handedness, "wrist")

    start = max(0, impact_frame - calibration.bat_speed_window_frames)
    end = min(len(frames) - 1, impact_frame + calibration.bat_speed_window_frames)

    speeds: List[float] = []
    for i in range(start, end):
        wrist1 = frames[i].get(wrist_idx)
        wrist2 = frames[i + 1].get(wrist_idx)
        if wrist1 is None or wrist2 is None:
            continue
        speeds.append(velocity(
            TimedPoint(wrist1.x, wrist1.y, frames[i].timestamp),
            TimedPoint(wrist2.x, wrist2.y, frames[i + 1].timestamp),
        ))

    if not speeds:
        return BatSpeed(impact_speed=0.0, max_speed=0.0, avg_speed=0.0, samples=0)

    impact_window = speeds[-calibration.impact_speed_frames:]
    return BatSpeed(
        impact_speed=float(np.mean(impact_window)),
        max_speed=float(max(speeds)),
        avg_speed=float(np.mean(speeds)),
        samples=len(speeds),
    )


def hip_rotation(frames: List[SkeletonFrame], impact_frame: int) -> HipRotation:
    """
    Hip-line rotation from the first frame to impact, plus the peak rotation.

    The peak scans every frame: it often lands slightly before or after impact.
    """
    initial_angle = line_angle(_frame_at(frames, 0), KeypointIndex.LEFT_HIP, KeypointIndex.RIGHT_HIP)
    impact_angle = line_angle(_frame_at(frames, impact_frame), KeypointIndex.LEFT_HIP, KeypointIndex.RIGHT_HIP)
    if initial_angle is None or impact_angle is None:
        return HipRotation(rotation_angle=0.0, peak_rotation=0.0, available=False)

    rotation_angle = abs(wrap_degrees(impact_angle - initial_angle))

    peak_rotation = 0.0
    for frame in frames:
        angle = line_angle(frame, KeypointIndex.LEFT_HIP, KeypointIndex.RIGHT_HIP)
        if angle is None:
            continue
        peak_rotation = max(peak_rotation, abs(wrap_degrees(angle - initial_angle)))

    return HipRotation(rotation_angle=rotation_angle, peak_rotation=peak_rotation, available=True)


def front_knee_angle(
    frames: List[SkeletonFrame],
    impact_frame: int,
    handedness: Handedness = Handedness.RIGHT,
) -> float:
    """Front knee flexion at impact (smaller = more bend); front leg is opposite the batting hand"""
    angle = leg_angle(_frame_at(frames, impact_frame), handedness.opposite)
    return angle if angle is not None else 0.0


def back_knee_angle(
    frames: List[SkeletonFrame],
    frame_index: int,
    handedness: Handedness = Handedness.RIGHT,
) -> float:
    """Back knee flexion; the back leg is on the batting-hand side"""
    angle = leg_angle(_frame_at(frames, frame_index), handedness)
    return angle if angle is not None else 0.0


def elbow_angles(
    frames: List[SkeletonFrame],
    impact_frame: int,
    handedness: Handedness = Handedness.RIGHT,
) -> ElbowAngles:
    """Lead (batting-hand side) and rear elbow angles at impact"""
    frame = _frame_at(frames, impact_frame)
    lead = arm_angle(frame, handedness)
    rear = arm_angle(frame, handedness.opposite)
    return ElbowAngles(
        lead_elbow=lead if lead is not None else 0.0,
        rear_elbow=rear if rear is not None else 0.0,
    )


def analyze_swing_biomechanics(
    frames: List[SkeletonFrame],
    impact_frame: int,
    handedness: Handedness = Handedness.RIGHT,
) -> SwingBiomechanics:
    """Bundle of the impact-centred biomechanical measurements"""
    return SwingBiomechanics(
        bat_speed=bat_speed(frames, impact_frame, handedness),
        hip_rotation=hip_rotation(frames, impact_frame),
        front_knee_angle=front_knee_angle(frames, impact_frame, handedness),
        elbow_angles=elbow_angles(frames, impact_frame, handedness),
    )


def compare_swings(player: SwingBiomechanics, model: SwingBiomechanics) -> Dict[str, float]:
    """Player-minus-model differences, e.g. against a reference swing"""
    return {
        "bat_speed_diff": player.bat_speed.impact_speed - model.bat_speed.impact_speed,
        "hip_rotation_diff": player.hip_rotation.rotation_angle - model.hip_rotation.rotation_angle,
        "front_knee_diff": player.front_knee_angle - model.front_knee_angle,
        "lead_elbow_diff": player.elbow_angles.lead_elbow - model.elbow_angles.lead_elbow,
        "rear_elbow_diff": player.elbow_angles.rear_elbow - model.elbow_angles.rear_elbow,
    }
