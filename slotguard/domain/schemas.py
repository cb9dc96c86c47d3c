"""
Request and result schemas exchanged with the validation core.

Requests arrive as loosely typed JSON bodies; these models parse them
strictly (unknown fields are rejected, required fields must be present)
so the checks only ever see well-formed values.
"""

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ErrorCode(str, Enum):
    """Closed set of domain failure codes."""
    NOT_ASSIGNED = "NOT_ASSIGNED"
    INVALID_TIME = "INVALID_TIME"
    CONFLICT = "CONFLICT"
    HAS_BOOKINGS = "HAS_BOOKINGS"


class ValidationStage(str, Enum):
    """Linear stages of the validation pipeline, in evaluation order."""
    ASSIGNMENT = "ASSIGNMENT"
    TIME = "TIME"
    CONFLICT = "CONFLICT"
    BOOKING_IMPACT = "BOOKING_IMPACT"
    VALID = "VALID"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _reject_offset(value: dt.time) -> dt.time:
    if value.tzinfo is not None:
        raise ValueError("time of day must not carry a UTC offset")
    return value


class ValidationRequest(BaseModel):
    """A proposed availability window for one team member at one shop."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    team_member_id: str = Field(min_length=1)
    shop_id: str = Field(min_length=1)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    exclude_id: Optional[str] = None  # Slot being edited or deleted

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_wall_clock(cls, value: dt.time) -> dt.time:
        """Times are wall-clock values in the configured timezone."""
        return _reject_offset(value)

    @field_validator("exclude_id", mode="before")
    @classmethod
    def normalize_exclude_id(cls, value: Any) -> Any:
        """Treat an empty exclude_id as absent."""
        return _blank_to_none(value)


class ConflictDescriptor(BaseModel):
    """One overlapping slot at another shop."""
    shop_name: str
    time: str


class ValidationResult(BaseModel):
    """Outcome of validating a proposed availability window."""
    valid: bool
    stage: ValidationStage = Field(exclude=True)
    error_code: Optional[ErrorCode] = None
    error: Optional[str] = None
    message: Optional[str] = None
    conflicts: Optional[List[ConflictDescriptor]] = None
    bookings_count: Optional[int] = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(valid=True, stage=ValidationStage.VALID, message="Availability is valid")

    @classmethod
    def failure(
        cls,
        stage: ValidationStage,
        error_code: ErrorCode,
        error: str,
        conflicts: Optional[List[ConflictDescriptor]] = None,
        bookings_count: Optional[int] = None
    ) -> "ValidationResult":
        return cls(
            valid=False,
            stage=stage,
            error_code=error_code,
            error=error,
            conflicts=conflicts,
            bookings_count=bookings_count
        )

    def to_response(self) -> Dict[str, Any]:
        """Serialize to the JSON body returned to callers."""
        return self.model_dump(mode="json", exclude_none=True)


class BatchTimeSlot(BaseModel):
    """A time-of-day window repeated on every planned date."""
    model_config = ConfigDict(extra="forbid")

    start_time: dt.time
    end_time: dt.time

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_wall_clock(cls, value: dt.time) -> dt.time:
        return _reject_offset(value)


class DateRange(BaseModel):
    """Inclusive range of calendar dates."""
    model_config = ConfigDict(extra="forbid")

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("date_range.end must not be before date_range.start")
        return self

    def days(self) -> List[dt.date]:
        count = (self.end - self.start).days + 1
        return [self.start + dt.timedelta(days=offset) for offset in range(count)]


class BatchPlanRequest(BaseModel):
    """
    Bulk creation request covering several team members and dates.

    days_of_week uses 0=Sunday ... 6=Saturday, matching the admin UI.
    """
    model_config = ConfigDict(extra="forbid")

    shop_id: str = Field(min_length=1)
    team_member_ids: List[str] = Field(min_length=1)
    date_range: DateRange
    time_slots: List[BatchTimeSlot] = Field(min_length=1)
    days_of_week: List[int] = Field(min_length=1)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"days_of_week must be between 0 and 6, got {invalid_days}")
        return value

    @field_validator("team_member_ids")
    @classmethod
    def dedupe_members(cls, value: List[str]) -> List[str]:
        # Preserve order while removing duplicates
        return list(dict.fromkeys(value))

    def planned_dates(self) -> List[dt.date]:
        """Dates in the range whose weekday was requested."""
        wanted = set(self.days_of_week)
        # date.weekday() is 0=Monday; shift to 0=Sunday
        return [day for day in self.date_range.days() if (day.weekday() + 1) % 7 in wanted]


class PlannedSlot(BaseModel):
    """A slot that passed validation and may be committed."""
    team_member_id: str
    shop_id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time


class SkippedSlot(PlannedSlot):
    """A candidate slot that failed validation."""
    error_code: ErrorCode
    error: str
