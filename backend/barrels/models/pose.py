"""
Pose data models: keypoints, skeleton frames and swings
"""

from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from barrels.config.base import settings


class KeypointIndex(IntEnum):
    """MediaPipe Pose landmark numbering shared by every geometry function"""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


KEYPOINT_COUNT = len(KeypointIndex)


class Handedness(str, Enum):
    RIGHT = "right"
    LEFT = "left"

    @property
    def opposite(self) -> "Handedness":
        return Handedness.LEFT if self is Handedness.RIGHT else Handedness.RIGHT


def side_index(side: Handedness, joint: str) -> KeypointIndex:
    """Resolve a sided joint, e.g. side_index(Handedness.LEFT, "knee") -> LEFT_KNEE"""
    return KeypointIndex[f"{side.value.upper()}_{joint.upper()}"]


class Keypoint(BaseModel):
    """One tracked landmark in normalized image coordinates (y grows downward)"""
    x: float
    y: float
    z: Optional[float] = None
    visibility: float = 1.0
    name: Optional[str] = None


class BatPoint(BaseModel):
    """Tracked bat knob/tip positions, when the pose pipeline provides them"""
    knob: Keypoint
    tip: Keypoint


class SkeletonFrame(BaseModel):
    frame: int
    timestamp: float
    keypoints: List[Optional[Keypoint]] = Field(default_factory=list)
    bat: Optional[BatPoint] = None

    def get(self, index: int) -> Optional[Keypoint]:
        """Return the keypoint at index when it is present and visible enough"""
        if index < 0 or index >= len(self.keypoints):
            return None
        keypoint = self.keypoints[index]
        if keypoint is None or keypoint.visibility < settings.MIN_KEYPOINT_VISIBILITY:
            return None
        return keypoint

    def has_usable_keypoints(self) -> bool:
        return any(self.get(i) is not None for i in range(len(self.keypoints)))


class Swing(BaseModel):
    """One batting attempt as produced by the pose pipeline"""
    swing_id: Optional[str] = None
    frames: List[SkeletonFrame] = Field(default_factory=list)
    fps: float = Field(default_factory=lambda: settings.DEFAULT_FPS, gt=0)
    impact_frame: Optional[int] = None
    player_height_in: float = Field(default_factory=lambda: settings.DEFAULT_PLAYER_HEIGHT_IN, gt=0)
    handedness: Handedness = Handedness.RIGHT
    camera_angle: str = "unknown"

    @model_validator(mode="after")
    def _check_impact_frame(self) -> "Swing":
        if self.frames and self.impact_frame is not None:
            if not 0 <= self.impact_frame <= len(self.frames) - 1:
                raise ValueError(
                    f"impact_frame {self.impact_frame} outside [0, {len(self.frames) - 1}]"
                )
        return self

    @property
    def resolved_impact_frame(self) -> int:
        """Impact frame, defaulting to the middle of the clip"""
        if self.impact_frame is not None:
            return self.impact_frame
        return len(self.frames) // 2

    @property
    def ms_per_frame(self) -> float:
        return 1000.0 / self.fps
