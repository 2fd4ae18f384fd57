"""
Ball-flight data models
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class BattedBallEvent(BaseModel):
    """One ball-contact outcome from a ball-flight sensor or manual entry"""
    exit_velocity: float = 0.0      # mph, 0 = no contact
    launch_angle: float = 0.0       # degrees
    is_fair: bool = False
    is_foul: bool = False
    is_miss: bool = False
    in_zone: Optional[bool] = None
    level: Optional[str] = None
    distance: Optional[float] = None  # feet
    swing_id: Optional[str] = None


class AngleWindow(BaseModel):
    min: float
    max: float


class BarrelResult(BaseModel):
    is_barrel: bool
    ev_mph: float
    la_deg: float
    level: str
    angle_window: Optional[AngleWindow] = None
    ev_min_for_level: float


class BarrelRequest(BaseModel):
    exit_velocity: float
    launch_angle: float
    is_fair: bool = True
    level: Optional[str] = None


class ContactQualityRequest(BaseModel):
    events: List[BattedBallEvent] = Field(default_factory=list)
    level: Optional[str] = None


class ContactQualitySummary(BaseModel):
    """Contact quality and consistency for a set of batted balls"""

    # Core metrics
    barrel_rate: Optional[float] = None     # 0.0 to 1.0
    avg_ev: Optional[float] = None
    avg_la: Optional[float] = None
    sd_ev: Optional[float] = None
    sd_la: Optional[float] = None
    max_ev: Optional[float] = None
    min_ev: Optional[float] = None
    avg_distance: Optional[float] = None

    # In-zone metrics (if zone data available)
    inzone_barrel_rate: Optional[float] = None
    inzone_avg_ev: Optional[float] = None
    inzone_avg_la: Optional[float] = None
    inzone_sd_ev: Optional[float] = None
    inzone_sd_la: Optional[float] = None

    # Breakdown, 0.0 to 1.0 of all events
    foul_pct: Optional[float] = None
    miss_pct: Optional[float] = None
    fair_pct: Optional[float] = None

    # Counts
    total_events: int = 0
    balls_in_play: int = 0
    fair_balls: int = 0
    fouls: int = 0
    misses: int = 0
    barrels: int = 0
    in_zone_balls: int = 0
    in_zone_fair: int = 0
    level: str = "hs"
