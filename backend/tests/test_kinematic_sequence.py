"""
Tests for the kinematic sequence analyzer, including the peak-timing sign convention
"""

import numpy as np
import pytest

from barrels.analyzers.kinematic_sequence import (
    SEGMENTS,
    angular_velocity,
    calculate_kinematic_sequence,
    find_peak,
    firing_order,
    peak_timing_ms,
    score_order,
    score_sequence,
    score_timing_gap,
    segment_angle,
    segment_angle_series,
)
from barrels.models.pose import Handedness, Keypoint, KeypointIndex

from conftest import FPS, IMPACT_FRAME, make_swing


def canonical_timings(gap_ms: float = 40.0):
    return {"pelvis": 3 * gap_ms, "torso": 2 * gap_ms, "arm": gap_ms, "bat": 0.0}


def test_canonical_order_with_ideal_gaps_scores_100():
    score, order_points, timing_points, order, gaps, gap_scores = score_sequence(canonical_timings())
    assert order == list(SEGMENTS)
    assert order_points == 50.0
    assert timing_points == pytest.approx(50.0)
    assert score == pytest.approx(100.0)
    assert gaps == {"pelvis_to_torso": 40.0, "torso_to_arm": 40.0, "arm_to_bat": 40.0}
    assert all(value == 100.0 for value in gap_scores.values())


def test_synthetic_canonical_swing_scores_100(canonical_swing):
    result = calculate_kinematic_sequence(canonical_swing.frames, IMPACT_FRAME, FPS, Handedness.RIGHT)
    assert result is not None
    assert result.is_canonical_order
    assert result.score == pytest.approx(100.0)
    assert [result.segments[s].peak_frame for s in SEGMENTS] == [48, 52, 56, 60]


def test_peak_timing_is_positive_before_impact():
    assert peak_timing_ms(impact_frame=60, peak_frame=48, fps=100.0) == pytest.approx(120.0)
    assert peak_timing_ms(impact_frame=60, peak_frame=66, fps=100.0) == pytest.approx(-60.0)


def test_largest_timing_is_earliest_peak(canonical_swing):
    """Ordering and timing agree: the earliest peaking segment has the largest timing value"""
    result = calculate_kinematic_sequence(canonical_swing.frames, IMPACT_FRAME, FPS)
    earliest = min(SEGMENTS, key=lambda s: result.segments[s].peak_frame)
    assert result.order[0] == earliest
    assert result.segments[earliest].timing_ms == max(p.timing_ms for p in result.segments.values())
    assert result.segments["pelvis"].timing_ms == pytest.approx(120.0)
    assert result.segments["bat"].timing_ms == pytest.approx(0.0)


def test_reversed_chain_loses_order_points():
    swing = make_swing(peaks={"pelvis": 60, "torso": 56, "arm": 52, "bat": 48})
    result = calculate_kinematic_sequence(swing.frames, IMPACT_FRAME, FPS)
    assert result.order == ["bat", "arm", "torso", "pelvis"]
    assert result.order_points == 0.0
    # gaps are absolute, so the timing half is still full
    assert result.score == pytest.approx(50.0)


def test_partial_order_credit():
    assert score_order(["pelvis", "arm", "torso", "bat"]) == pytest.approx(25.0)
    assert score_order(list(SEGMENTS)) == 50.0


def test_firing_order_ties_keep_canonical_order():
    assert firing_order({"pelvis": 40.0, "torso": 40.0, "arm": 40.0, "bat": 40.0}) == list(SEGMENTS)


@pytest.mark.parametrize("gap,expected", [
    (40.0, 100.0),
    (30.0, 100.0),
    (50.0, 100.0),
    (55.0, 90.0),
    (20.0, 80.0),
    (120.0, 0.0),
])
def test_score_timing_gap(gap, expected):
    assert score_timing_gap(gap) == pytest.approx(expected)


def test_score_is_clamped():
    score, *_ = score_sequence({"pelvis": 0.0, "torso": 0.0, "arm": 0.0, "bat": 0.0})
    assert 0.0 <= score <= 100.0
    # canonical by tie-break; every gap is 40 ms off ideal and scores 40
    assert score == pytest.approx(70.0)


def test_angular_velocity_pads_boundaries():
    velocities = angular_velocity(np.array([0.0, 1.0, 3.0, 6.0]), fps=10.0)
    assert velocities.tolist() == pytest.approx([15.0, 15.0, 25.0, 25.0])


def test_angular_velocity_of_short_series_is_zero():
    assert angular_velocity(np.array([0.0, 5.0]), fps=60.0).tolist() == [0.0, 0.0]


def test_find_peak_takes_first_maximum():
    assert find_peak(np.array([1.0, 3.0, 3.0, 2.0])) == (3.0, 1)


def test_segment_series_is_unwrapped(canonical_swing):
    frames = canonical_swing.frames[:3]
    # hip line crossing the +-180 degree boundary
    for frame, y in zip(frames, (0.01, -0.01, 0.01)):
        frame.keypoints[KeypointIndex.LEFT_HIP] = Keypoint(x=0.6, y=0.5)
        frame.keypoints[KeypointIndex.RIGHT_HIP] = Keypoint(x=0.4, y=0.5 + y)
    angles = segment_angle_series(frames, "pelvis")
    assert np.max(np.abs(np.diff(angles))) < 10.0


def test_missing_frames_hold_last_angle(canonical_swing):
    frames = canonical_swing.frames[:5]
    frames[2].keypoints[KeypointIndex.LEFT_SHOULDER] = None
    angles = segment_angle_series(frames, "torso")
    assert angles[2] == pytest.approx(angles[1])


def test_depth_plane_used_when_available(canonical_swing):
    frame = canonical_swing.frames[0]
    frame.keypoints[KeypointIndex.LEFT_HIP] = Keypoint(x=0.4, y=0.5, z=0.0)
    frame.keypoints[KeypointIndex.RIGHT_HIP] = Keypoint(x=0.5, y=0.5, z=0.1)
    assert segment_angle(frame, "pelvis") == pytest.approx(np.pi / 4)


def test_plane_is_fixed_for_whole_series(canonical_swing):
    frames = canonical_swing.frames[:3]
    for frame in frames[:2]:
        frame.keypoints[KeypointIndex.LEFT_HIP] = Keypoint(x=0.4, y=0.5, z=0.0)
        frame.keypoints[KeypointIndex.RIGHT_HIP] = Keypoint(x=0.5, y=0.5, z=0.1)
    angles = segment_angle_series(frames, "pelvis")
    # the third frame has no z, so every frame is measured in the image plane
    assert angles[0] == pytest.approx(0.0)
    assert angles[1] == pytest.approx(0.0)


def test_untracked_bat_frames_hold_last_angle(canonical_swing):
    frames = canonical_swing.frames[:5]
    frames[2].bat = None
    angles = segment_angle_series(frames, "bat")
    assert angles[2] == pytest.approx(angles[1])


def test_intermittent_bat_tracking_keeps_bat_peak(canonical_swing):
    tracked = calculate_kinematic_sequence(canonical_swing.frames, IMPACT_FRAME, FPS)
    for index, frame in enumerate(canonical_swing.frames):
        if index % 7 == 3:
            frame.bat = None
    partial = calculate_kinematic_sequence(canonical_swing.frames, IMPACT_FRAME, FPS)

    assert tracked.segments["bat"].peak_frame == IMPACT_FRAME
    assert partial.segments["bat"].peak_frame == IMPACT_FRAME
    assert partial.segments["bat"].timing_ms == pytest.approx(0.0)
    assert partial.score == pytest.approx(tracked.score)


def test_bat_falls_back_to_lead_arm():
    swing = make_swing(with_bat=False)
    frame = swing.frames[10]
    assert segment_angle(frame, "bat", Handedness.RIGHT) == pytest.approx(segment_angle(frame, "arm", Handedness.RIGHT))


def test_unknown_segment_raises(canonical_swing):
    with pytest.raises(ValueError):
        segment_angle(canonical_swing.frames[0], "knee")


def test_missing_segment_makes_sequence_absent(canonical_swing):
    for frame in canonical_swing.frames:
        frame.keypoints[KeypointIndex.RIGHT_SHOULDER] = None
    assert calculate_kinematic_sequence(canonical_swing.frames, IMPACT_FRAME, FPS) is None
