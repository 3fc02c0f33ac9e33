"""
Shift configuration and work-hours calculation for attendance.

Times are 12-hour strings such as "9:05 AM". Hours are decimals.
"""
import math
import re
from dataclasses import dataclass
from typing import Dict, Optional

TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)

# Lunch longer than this is deducted from worked time
LUNCH_ALLOWANCE_HOURS = 0.5


@dataclass(frozen=True)
class ShiftConfig:
    name: str
    start: float
    end: float
    target_hours: float
    lunch_start: Optional[float] = None
    lunch_end: Optional[float] = None

    @property
    def has_lunch(self) -> bool:
        return self.lunch_start is not None


SHIFT_CONFIGS: Dict[str, ShiftConfig] = {
    "day": ShiftConfig("Day Shift", 10.0, 18.5, 8.5, lunch_start=13.0, lunch_end=13.5),
    "night": ShiftConfig("Night Shift", 16.0, 24.5, 8.5, lunch_start=20.0, lunch_end=20.5),
    "sunday": ShiftConfig("Sunday Shift", 9.0, 13.0, 4.0),
}


def parse_time_string(value: Optional[str]) -> Optional[float]:
    """Parse "h:mm AM|PM" into decimal hours (0-24). Returns None when unparseable."""
    if not value or not value.strip():
        return None
    match = TIME_PATTERN.search(value)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return hour + minute / 60


def decimal_to_time12(hours: float) -> str:
    """Format decimal hours as "h:mm AM|PM" (24.5 wraps to 12:30 AM)."""
    hour24 = int(math.floor(hours)) % 24
    minute = int(round((hours % 1) * 60))
    period = "PM" if hour24 >= 12 else "AM"
    hour12 = hour24 % 12 or 12
    return f"{hour12}:{minute:02d} {period}"


def format_hours(hours: float) -> str:
    """Format decimal hours as "H:MM" (negative values keep their sign)."""
    if hours == 0:
        return "0:00"
    h = int(math.floor(abs(hours)))
    m = int(round((abs(hours) % 1) * 60))
    if m == 60:
        h, m = h + 1, 0
    sign = "-" if hours < 0 else ""
    return f"{sign}{h}:{m:02d}"


def _no_work(config: ShiftConfig) -> Dict[str, float]:
    return {
        "work_hrs": 0.0,
        "ot_hrs": 0.0,
        "pending_hrs": config.target_hours,
        "actual_work_hrs": 0.0,
    }


def calculate_work_hours(
    check_in: Optional[str],
    check_out: Optional[str],
    lunch_start: Optional[str] = None,
    lunch_end: Optional[str] = None,
    shift: str = "day"
) -> Dict[str, float]:
    """
    Calculate worked, pending and actual hours for one day.

    Night shifts may end after midnight: a check-out at or before the
    check-in is moved to the next day. Only the part of lunch beyond the
    30 minute allowance is deducted.

    Args:
        check_in: Check-in time
        check_out: Check-out time
        lunch_start: Time the employee left for lunch
        lunch_end: Time the employee came back
        shift: "day", "night" or "sunday"

    Returns:
        Dict with work_hrs, ot_hrs, pending_hrs, actual_work_hrs (4 decimals)
    """
    config = SHIFT_CONFIGS.get(shift, SHIFT_CONFIGS["day"])
    ci = parse_time_string(check_in)
    co = parse_time_string(check_out)

    if ci is None or co is None:
        return _no_work(config)

    if shift == "night" and co <= ci:
        co += 24
    if co <= ci:
        return _no_work(config)

    total = co - ci

    extra_lunch = 0.0
    ls = parse_time_string(lunch_start)
    le = parse_time_string(lunch_end)
    if config.has_lunch and ls is not None and le is not None:
        if shift == "night" and le <= ls:
            le += 24
        if le > ls:
            extra_lunch = max(0.0, (le - ls) - LUNCH_ALLOWANCE_HOURS)

    net = max(0.0, total - extra_lunch)
    target = config.target_hours

    return {
        "work_hrs": round(min(net, target), 4),
        "ot_hrs": 0.0,
        "pending_hrs": round(max(0.0, target - net), 4),
        "actual_work_hrs": round(net, 4),
    }


def default_lunch_times(shift: str) -> Dict[str, Optional[str]]:
    """Lunch times pre-filled from the shift configuration."""
    config = SHIFT_CONFIGS.get(shift, SHIFT_CONFIGS["day"])
    if not config.has_lunch:
        return {"lunch_start": None, "lunch_end": None}
    return {
        "lunch_start": decimal_to_time12(config.lunch_start),
        "lunch_end": decimal_to_time12(config.lunch_end),
    }
