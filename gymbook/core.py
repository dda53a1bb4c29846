# gymbook/core.py
"""
Booking rules for the shared gym.

`evaluate_booking` decides whether a proposed slot may be reserved. It is a
pure function of its arguments: the caller supplies the clock, the requester
and a reader over existing bookings, and performs the insert itself.

Checks run in a fixed order and the first failure wins. The checks that need
no stored data come first, so a request rejected early never queries the
bookings table.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Protocol, Sequence

from .config import Settings, get_settings
from .schemas import Role


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # touching endpoints do not overlap
    return a_start < b_end and b_start < a_end


class Rule(str, Enum):
    past = "past"
    order = "order"
    alignment = "alignment"
    duration = "duration"
    horizon = "horizon"
    hours = "hours"
    overlap = "overlap"
    daily_limit = "daily_limit"
    too_far = "too_far"


CONFLICT_RULES = frozenset({Rule.overlap, Rule.daily_limit})


@dataclass(frozen=True)
class Decision:
    start: datetime
    end: Optional[datetime] = None
    rule: Optional[Rule] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.rule is None

    @property
    def is_conflict(self) -> bool:
        return self.rule in CONFLICT_RULES


class BookingReader(Protocol):
    def overlapping(self, start: datetime, end: datetime) -> Sequence:
        """Bookings of anyone whose interval overlaps [start, end)."""

    def owned_between(self, user_id: int, start: datetime, end: datetime) -> Sequence:
        """Bookings of user_id whose start falls in [start, end)."""


def as_instant(value: datetime, settings: Optional[Settings] = None) -> datetime:
    """Aware UTC instant. Naive values are read as facility wall-clock time."""
    if value.tzinfo is None or value.utcoffset() is None:
        settings = settings or get_settings()
        value = settings.tz.localize(value)
    return value.astimezone(timezone.utc)


def local_day_bounds(instant: datetime, settings: Settings, offset_days: int = 0):
    """[midnight, next midnight) of the facility day containing `instant`."""
    tz = settings.tz
    day = instant.astimezone(tz).date() + timedelta(days=offset_days)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def horizon_for(role: Role, settings: Settings) -> Optional[timedelta]:
    if role is Role.neighbor:
        return timedelta(days=settings.neighbor_horizon_days)
    if role is Role.trainer:
        return timedelta(days=settings.trainer_horizon_days)
    if role is Role.admin:
        return None
    raise ValueError(f"unknown role: {role!r}")


def _aligned(instant: datetime, settings: Settings) -> bool:
    local = instant.astimezone(settings.tz)
    return (
        local.minute % settings.slot_minutes == 0
        and local.second == 0
        and local.microsecond == 0
    )


def _within_opening_hours(start: datetime, end: datetime, settings: Settings) -> bool:
    tz = settings.tz
    day = start.astimezone(tz).date()
    opens = tz.localize(datetime.combine(day, time(settings.open_hour)))
    closes = tz.localize(datetime.combine(day, time(settings.close_hour)))
    return start >= opens and end <= closes


def _hour_label(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    return f"{(hour - 1) % 12 + 1}:00 {suffix}"


def evaluate_booking(
    start: datetime,
    end: datetime,
    role,
    user_id: int,
    reader: BookingReader,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Decision:
    settings = settings or get_settings()
    role = Role(role)
    start = as_instant(start, settings)
    end = as_instant(end, settings)
    now = as_instant(now, settings) if now is not None else datetime.now(timezone.utc)

    def reject(rule: Rule, message: str) -> Decision:
        return Decision(start=start, end=end, rule=rule, message=message)

    # 1) No bookings in the past
    if start < now:
        return reject(Rule.past, "Cannot book time slots in the past")

    # 2) Start before end
    if not start < end:
        return reject(Rule.order, "Start time must be before end time")

    # 3) Slot grid
    if not (_aligned(start, settings) and _aligned(end, settings)):
        return reject(
            Rule.alignment,
            "Bookings must start and end on the hour (:00) or half-hour (:30)",
        )

    # 4) Maximum length
    if end - start > timedelta(minutes=settings.max_duration_minutes):
        return reject(
            Rule.duration,
            f"Booking duration cannot exceed {settings.max_duration_minutes} minutes",
        )

    # 5) How far ahead this role may book
    horizon = horizon_for(role, settings)
    if horizon is not None and start > now + horizon:
        return reject(
            Rule.horizon,
            f"{role.value.capitalize()}s can only book up to {horizon.days} days in advance",
        )

    # 6) Opening hours
    if not _within_opening_hours(start, end, settings):
        return reject(
            Rule.hours,
            f"Gym is only open from {_hour_label(settings.open_hour)} "
            f"to {_hour_label(settings.close_hour)}",
        )

    # 7) One booking at a time for the whole gym
    if reader.overlapping(start, end):
        return reject(Rule.overlap, "This time slot is already booked")

    # 8) Neighbors get one booking per calendar day
    if role is Role.neighbor:
        day_start, day_end = local_day_bounds(start, settings)
        if reader.owned_between(user_id, day_start, day_end):
            return reject(
                Rule.daily_limit,
                "You already have a booking on this day. Neighbors can only book once per day.",
            )

    return Decision(start=start, end=end)


def precheck_start(
    start: datetime,
    role,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Decision:
    """Quick date check for a slot the caller is about to pick.

    Day granularity only: anything from the start of today is fine, neighbors
    are capped at the end of the seventh day from today and everyone at the
    end of the last allowed day.
    """
    settings = settings or get_settings()
    role = Role(role)
    start = as_instant(start, settings)
    now = as_instant(now, settings) if now is not None else datetime.now(timezone.utc)

    today_start, _ = local_day_bounds(now, settings)
    if start < today_start:
        return Decision(start=start, rule=Rule.past, message="Cannot book time slots in the past")

    if role is Role.neighbor:
        limit, _ = local_day_bounds(now, settings, offset_days=settings.neighbor_horizon_days + 1)
        if start >= limit:
            return Decision(
                start=start,
                rule=Rule.horizon,
                message=f"You can only book gym slots up to {settings.neighbor_horizon_days} days in advance",
            )

    limit, _ = local_day_bounds(now, settings, offset_days=settings.validate_max_days + 1)
    if start >= limit:
        return Decision(start=start, rule=Rule.too_far, message="The booking date is too far in the future")

    return Decision(start=start)
