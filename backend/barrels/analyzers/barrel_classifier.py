"""
Barrel classification from exit velocity and launch angle, adjusted by competition level
"""

from typing import List, Optional

from barrels.models.ball import AngleWindow, BarrelResult, BattedBallEvent
from barrels.utils.scoring_configs import (
    BARREL_ANGLE_TABLE,
    CANONICAL_EV_MIN,
    get_level_ev_min,
    normalize_level,
)


def angle_window_for_ev(ev_mph: float) -> AngleWindow:
    """Launch-angle window for an exit velocity on the canonical (pro) scale"""
    for step in BARREL_ANGLE_TABLE:
        if step.ev_below is None or ev_mph < step.ev_below:
            return AngleWindow(min=step.min_angle, max=step.max_angle)
    last = BARREL_ANGLE_TABLE[-1]
    return AngleWindow(min=last.min_angle, max=last.max_angle)


def compute_is_barrel(
    exit_velocity: float,
    launch_angle: float,
    is_fair: bool = True,
    level: Optional[str] = None,
) -> BarrelResult:
    """
    Decide whether one batted ball is a barrel.

    Foul balls and balls below the level's exit-velocity floor are never barrels
    and carry no angle window. Otherwise the velocity is shifted onto the pro
    scale before the window lookup, so a 92 mph ball at high-school level is
    judged like a 98 mph ball in the pros.
    """
    level_key = normalize_level(level)
    ev_min = get_level_ev_min(level_key)

    result = BarrelResult(
        is_barrel=False,
        ev_mph=exit_velocity,
        la_deg=launch_angle,
        level=level_key,
        angle_window=None,
        ev_min_for_level=ev_min,
    )

    if not is_fair or exit_velocity < ev_min:
        return result

    projected_ev = exit_velocity - (ev_min - CANONICAL_EV_MIN)
    window = angle_window_for_ev(projected_ev)

    result.angle_window = window
    result.is_barrel = window.min <= launch_angle <= window.max
    return result


def compute_barrels_for_events(
    events: List[BattedBallEvent],
    default_level: Optional[str] = None,
) -> List[BarrelResult]:
    """Classify a batch of events; an event's own level wins over default_level"""
    return [
        compute_is_barrel(
            event.exit_velocity,
            event.launch_angle,
            event.is_fair,
            event.level or default_level,
        )
        for event in events
    ]
