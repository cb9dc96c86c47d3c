"""
Domain models for shops, availability slots, assignments and bookings.
"""

from dataclasses import dataclass
from datetime import date, datetime, time

import pendulum
from pendulum import DateTime


@dataclass(frozen=True)
class TimeWindow:
    """
    Represents an immutable half-open time-of-day window ``[start, end)``.

    Windows are compared on wall-clock values; both sides of a comparison
    must belong to the same calendar date.

    Invariant: start must be before end.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window overlaps with another. Touching windows do not overlap."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return format_time_window(self.start, self.end)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open range of absolute instants ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        # Same-zone datetimes compare on wall clock, so compare instants
        if self.start.timestamp() >= self.end.timestamp():
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def on_date(
        cls,
        day: date,
        window: TimeWindow,
        timezone: str = "UTC"
    ) -> "TimeRange":
        """
        Build the absolute range covered by a time-of-day window on a date.

        When both bounds fall into the same DST gap they resolve to one instant;
        the end is then the start plus the window's wall-clock length.

        Args:
            day: Calendar date the window belongs to
            window: Time-of-day window
            timezone: IANA timezone the times are expressed in
        """
        start = at_time_of_day(day, window.start, timezone)
        end = at_time_of_day(day, window.end, timezone)
        if end.timestamp() <= start.timestamp():
            end = start + (datetime.combine(day, window.end) - datetime.combine(day, window.start))

        return cls(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


def at_time_of_day(day: date, moment: time, timezone: str = "UTC") -> DateTime:
    """Combine a calendar date and a time of day into an aware datetime."""
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        moment.hour,
        moment.minute,
        moment.second,
        tz=timezone
    )


def format_time_window(start_time: time, end_time: time) -> str:
    """Format a time-of-day window as ``HH:MM - HH:MM``."""
    return f"{start_time.strftime('%H:%M')} - {end_time.strftime('%H:%M')}"


@dataclass(frozen=True)
class Shop:
    """A physical shop location."""
    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class ShopAssignment:
    """Links a team member to a shop they may work at."""
    team_member_id: str
    shop_id: str
    is_active: bool = True


@dataclass(frozen=True)
class AvailabilitySlot:
    """
    One open interval during which a team member works at a shop.

    Invariant: start_time must be before end_time.
    """
    id: str
    team_member_id: str
    shop_id: str
    date: date
    start_time: time
    end_time: time
    is_active: bool = True

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Slot {self.id}: start time {self.start_time} must be before end time {self.end_time}"
            )

    def window(self) -> TimeWindow:
        """Return the time-of-day window this slot covers."""
        return TimeWindow(self.start_time, self.end_time)

    def format_window(self) -> str:
        return str(self.window())


@dataclass(frozen=True)
class Booking:
    """A client appointment with a team member at a shop."""
    id: str
    booking_number: str
    client_id: str | None
    team_member_id: str
    shop_id: str
    starts_at: DateTime
    ends_at: DateTime
    status: str
