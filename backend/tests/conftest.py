"""
Pytest configuration and fixtures for testing
"""

import math
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

# Keep test runs from writing log files
os.environ.setdefault("LOG_FILE", "")

from fastapi.testclient import TestClient

from barrels.main import app
from barrels.models.assessment import AssessmentSession, SessionStatus
from barrels.models.ball import BattedBallEvent
from barrels.models.pose import (
    KEYPOINT_COUNT,
    BatPoint,
    Handedness,
    Keypoint,
    KeypointIndex,
    SkeletonFrame,
    Swing,
    side_index,
)
from barrels.services.storage import InMemoryAssessmentStore, get_store

FPS = 100.0
FRAME_COUNT = 80
IMPACT_FRAME = 60
LOWEST_HIP_FRAME = 30

# Peaks 40 ms apart at 100 fps, bat peaking at impact
CANONICAL_PEAKS = {"pelvis": 48, "torso": 52, "arm": 56, "bat": 60}


def rotation_angle(frame: int, peak_frame: int, amplitude: float = 0.5, width: float = 3.0) -> float:
    """Smooth rotation whose angular speed peaks exactly at peak_frame"""
    return amplitude * math.tanh((frame - peak_frame) / width)


def make_frame(
    index: int,
    peaks: Dict[str, int],
    handedness: Handedness = Handedness.RIGHT,
    fps: float = FPS,
    with_bat: bool = True,
    front_ankle_shift: float = 0.0,
    nose_shift: float = 0.0,
) -> SkeletonFrame:
    keypoints: List[Optional[Keypoint]] = [None] * KEYPOINT_COUNT

    def put(index_: KeypointIndex, x: float, y: float):
        keypoints[index_] = Keypoint(x=x, y=y, visibility=0.9, name=index_.name.lower())

    # Hips drop to their lowest point at LOWEST_HIP_FRAME
    hip_y = 0.6 + 0.02 * math.exp(-((index - LOWEST_HIP_FRAME) / 5.0) ** 2)
    pelvis = rotation_angle(index, peaks["pelvis"])
    put(KeypointIndex.LEFT_HIP, 0.5 - 0.08 * math.cos(pelvis), hip_y - 0.08 * math.sin(pelvis))
    put(KeypointIndex.RIGHT_HIP, 0.5 + 0.08 * math.cos(pelvis), hip_y + 0.08 * math.sin(pelvis))

    torso = rotation_angle(index, peaks["torso"])
    put(KeypointIndex.LEFT_SHOULDER, 0.5 - 0.1 * math.cos(torso), 0.35 - 0.1 * math.sin(torso))
    put(KeypointIndex.RIGHT_SHOULDER, 0.5 + 0.1 * math.cos(torso), 0.35 + 0.1 * math.sin(torso))

    # Lead arm and back leg sit on the batting-hand side, the front leg opposite
    hand_side = handedness
    front_side = handedness.opposite
    hand_x = 0.6 if hand_side is Handedness.RIGHT else 0.4
    front_x = 1.0 - hand_x

    arm = rotation_angle(index, peaks["arm"])
    lead_elbow = (hand_x, 0.45)
    lead_wrist = (lead_elbow[0] + 0.12 * math.cos(arm), lead_elbow[1] + 0.12 * math.sin(arm))
    put(side_index(hand_side, "elbow"), *lead_elbow)
    put(side_index(hand_side, "wrist"), *lead_wrist)
    put(side_index(front_side, "elbow"), front_x, 0.45)
    put(side_index(front_side, "wrist"), front_x + 0.05, 0.55)

    put(side_index(front_side, "knee"), front_x + 0.02, 0.75)
    put(side_index(front_side, "ankle"), front_x - front_ankle_shift * index / fps, 0.9)
    put(side_index(hand_side, "knee"), hand_x - 0.02, 0.78)
    put(side_index(hand_side, "ankle"), hand_x, 0.9)

    put(KeypointIndex.NOSE, 0.5 + nose_shift * index / fps, 0.25)

    bat = None
    if with_bat:
        bat_angle = rotation_angle(index, peaks["bat"])
        knob = Keypoint(x=lead_wrist[0], y=lead_wrist[1])
        tip = Keypoint(x=knob.x + 0.3 * math.cos(bat_angle), y=knob.y + 0.3 * math.sin(bat_angle))
        bat = BatPoint(knob=knob, tip=tip)

    return SkeletonFrame(frame=index, timestamp=index / fps, keypoints=keypoints, bat=bat)


def make_swing(
    swing_id: str = "swing-1",
    peaks: Optional[Dict[str, int]] = None,
    handedness: Handedness = Handedness.RIGHT,
    frame_count: int = FRAME_COUNT,
    impact_frame: Optional[int] = IMPACT_FRAME,
    fps: float = FPS,
    with_bat: bool = True,
    front_ankle_shift: float = 0.0,
    nose_shift: float = 0.0,
) -> Swing:
    """Synthetic swing with controllable segment peak frames"""
    peaks = peaks or CANONICAL_PEAKS
    frames = [
        make_frame(i, peaks, handedness, fps, with_bat, front_ankle_shift, nose_shift)
        for i in range(frame_count)
    ]
    return Swing(
        swing_id=swing_id,
        frames=frames,
        fps=fps,
        impact_frame=impact_frame,
        handedness=handedness,
        player_height_in=70.0,
    )


def make_event(
    exit_velocity: float,
    launch_angle: float,
    fair: bool = True,
    foul: bool = False,
    in_zone: Optional[bool] = None,
    distance: Optional[float] = None,
) -> BattedBallEvent:
    return BattedBallEvent(
        exit_velocity=exit_velocity,
        launch_angle=launch_angle,
        is_fair=fair and exit_velocity > 0 and not foul,
        is_foul=foul,
        is_miss=exit_velocity == 0 and not foul,
        in_zone=in_zone,
        distance=distance,
    )


def make_session(
    session_id: str,
    athlete_id: str = "athlete-1",
    days_ago: int = 0,
    status: SessionStatus = SessionStatus.PENDING,
    swings: Optional[List[Swing]] = None,
    ball_events: Optional[List[BattedBallEvent]] = None,
) -> AssessmentSession:
    return AssessmentSession(
        session_id=session_id,
        athlete_id=athlete_id,
        created_at=datetime(2024, 11, 28, tzinfo=timezone.utc) - timedelta(days=days_ago),
        status=status,
        level="hs",
        swings=swings if swings is not None else [make_swing("s1"), make_swing("s2")],
        ball_events=ball_events if ball_events is not None else [],
    )


@pytest.fixture
def canonical_swing() -> Swing:
    return make_swing()


@pytest.fixture
def sample_events() -> List[BattedBallEvent]:
    """Fully categorized session: 3 fair (2 barrels at hs), 1 foul, 1 miss"""
    return [
        make_event(92.0, 28.0, in_zone=True, distance=310.0),
        make_event(95.0, 25.0, in_zone=True, distance=330.0),
        make_event(80.0, 10.0, in_zone=False, distance=180.0),
        make_event(70.0, 45.0, foul=True),
        make_event(0.0, 0.0, fair=False),
    ]


@pytest.fixture
def store() -> InMemoryAssessmentStore:
    return InMemoryAssessmentStore()


@pytest.fixture
def client(store):
    """Create a test client for FastAPI app backed by an in-memory store"""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
