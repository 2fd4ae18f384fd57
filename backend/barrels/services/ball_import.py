"""
Ball-flight data import from HitTrax CSV exports
"""

import csv
import io
from typing import Dict, Iterable, List, Optional

from barrels.models.ball import BattedBallEvent
from barrels.utils.logger import get_logger
from barrels.utils.scoring_configs import IN_ZONE_CELLS

logger = get_logger(__name__)

# Accepted header spellings per field, matched case-insensitively
HITTRAX_COLUMNS: Dict[str, List[str]] = {
    "row_number": ["row", "rownum", "#", "swing_number"],
    "exit_velocity": ["velo", "exit_velo", "exit_velocity", "ev"],
    "launch_angle": ["la", "launch_angle", "angle"],
    "distance": ["dist", "distance", "d"],
    "result": ["res", "result", "outcome"],
    "strike_zone": ["strike zone", "strike_zone", "zone", "sz"],
    "level": ["level", "player_level", "age_group"],
}

EMPTY_VALUES = ("", "n/a", "null")


def get_column_value(row: Dict[str, str], names: Iterable[str]) -> Optional[str]:
    """First value found under any of the given header spellings"""
    normalized = {key.strip().lower(): value for key, value in row.items() if key is not None}
    for name in names:
        value = normalized.get(name.lower())
        if value is not None:
            return value.strip()
    return None


def parse_number(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip().lower() in EMPTY_VALUES:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_int(value: Optional[str]) -> Optional[int]:
    number = parse_number(value)
    return int(number) if number is not None else None


def hittrax_row_to_event(
    exit_velocity: Optional[float],
    launch_angle: Optional[float],
    result: Optional[str],
    strike_zone: Optional[int] = None,
    level: Optional[str] = None,
    distance: Optional[float] = None,
) -> BattedBallEvent:
    """
    Convert one HitTrax swing into a batted-ball event.

    A result containing "foul" is a foul; no exit velocity without a foul is a
    miss; any other contact is fair. Zone cells 4-12 are in the strike zone.
    """
    velocity = exit_velocity or 0.0
    is_foul = "foul" in (result or "").lower()
    has_contact = velocity > 0

    return BattedBallEvent(
        exit_velocity=velocity,
        launch_angle=launch_angle or 0.0,
        is_fair=has_contact and not is_foul,
        is_foul=is_foul,
        is_miss=velocity == 0 and not is_foul,
        in_zone=strike_zone in IN_ZONE_CELLS if strike_zone else None,
        level=level or None,
        distance=distance,
    )


def parse_hittrax_csv(text: str, level: Optional[str] = None) -> List[BattedBallEvent]:
    """
    Parse a HitTrax CSV export into batted-ball events

    Rows without a row number are skipped (HitTrax totals and blank lines).
    A level given here is used for rows that carry none.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    events: List[BattedBallEvent] = []
    skipped = 0

    for row in reader:
        if parse_int(get_column_value(row, HITTRAX_COLUMNS["row_number"])) is None:
            skipped += 1
            continue
        events.append(hittrax_row_to_event(
            exit_velocity=parse_number(get_column_value(row, HITTRAX_COLUMNS["exit_velocity"])),
            launch_angle=parse_number(get_column_value(row, HITTRAX_COLUMNS["launch_angle"])),
            result=get_column_value(row, HITTRAX_COLUMNS["result"]),
            strike_zone=parse_int(get_column_value(row, HITTRAX_COLUMNS["strike_zone"])),
            level=get_column_value(row, HITTRAX_COLUMNS["level"]) or level,
            distance=parse_number(get_column_value(row, HITTRAX_COLUMNS["distance"])),
        ))

    logger.info(f"Parsed {len(events)} HitTrax swings ({skipped} rows skipped)")
    return events
