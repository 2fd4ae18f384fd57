"""
Contact-quality aggregation over a session's batted-ball events
"""

from typing import List, Optional

import numpy as np

from barrels.analyzers.barrel_classifier import compute_barrels_for_events
from barrels.models.ball import BattedBallEvent, ContactQualitySummary
from barrels.utils.scoring_configs import normalize_level


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return float(np.mean(values))


def _std(values: List[float]) -> Optional[float]:
    """Population standard deviation, None for an empty set"""
    if not values:
        return None
    return float(np.std(values))


def _ratio(count: int, total: int) -> Optional[float]:
    if total == 0:
        return None
    return count / total


def compute_contact_quality_summary(
    events: List[BattedBallEvent],
    level: Optional[str] = None,
) -> ContactQualitySummary:
    """
    Summarize batted-ball events from one session.

    Barrel rate is measured over fair balls; velocity and angle statistics over
    balls in play (any contact); percentages over every event. Statistics over
    an empty subset are None rather than 0.
    """
    level_key = normalize_level(level)

    balls_in_play = [e for e in events if e.exit_velocity > 0]
    fair_balls = [e for e in balls_in_play if e.is_fair]
    fouls = [e for e in events if e.is_foul]
    misses = [e for e in events if e.is_miss]

    in_zone_balls = [e for e in balls_in_play if e.in_zone is True]
    in_zone_fair = [e for e in fair_balls if e.in_zone is True]

    barrels = sum(1 for r in compute_barrels_for_events(fair_balls, level_key) if r.is_barrel)
    in_zone_barrels = sum(1 for r in compute_barrels_for_events(in_zone_fair, level_key) if r.is_barrel)

    exit_velocities = [e.exit_velocity for e in balls_in_play]
    launch_angles = [e.launch_angle for e in balls_in_play]
    distances = [e.distance for e in balls_in_play if e.distance is not None]

    total = len(events)

    return ContactQualitySummary(
        barrel_rate=_ratio(barrels, len(fair_balls)),
        avg_ev=_mean(exit_velocities),
        avg_la=_mean(launch_angles),
        sd_ev=_std(exit_velocities),
        sd_la=_std(launch_angles),
        max_ev=max(exit_velocities) if exit_velocities else None,
        min_ev=min(exit_velocities) if exit_velocities else None,
        avg_distance=_mean(distances),

        inzone_barrel_rate=_ratio(in_zone_barrels, len(in_zone_fair)),
        inzone_avg_ev=_mean([e.exit_velocity for e in in_zone_balls]),
        inzone_avg_la=_mean([e.launch_angle for e in in_zone_balls]),
        inzone_sd_ev=_std([e.exit_velocity for e in in_zone_balls]),
        inzone_sd_la=_std([e.launch_angle for e in in_zone_balls]),

        foul_pct=_ratio(len(fouls), total),
        miss_pct=_ratio(len(misses), total),
        fair_pct=_ratio(len(fair_balls), total),

        total_events=total,
        balls_in_play=len(balls_in_play),
        fair_balls=len(fair_balls),
        fouls=len(fouls),
        misses=len(misses),
        barrels=barrels,
        in_zone_balls=len(in_zone_balls),
        in_zone_fair=len(in_zone_fair),
        level=level_key,
    )
