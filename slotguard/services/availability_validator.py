"""
Ordered validation of proposed availability windows.

The validator reads current records through a ``RecordStoreProtocol`` and
delegates overlap detection to the domain-level ``ConflictScanner``. It
never writes: a successful result is advice to the commit path, which must
still enforce non-overlap itself since two concurrent validations can both
pass before either slot is saved.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..domain.conflict_scanner import ConflictScanner
from ..domain.models import AvailabilitySlot, TimeRange, TimeWindow, format_time_window
from ..domain.schemas import (
    ConflictDescriptor,
    ErrorCode,
    ValidationRequest,
    ValidationResult,
    ValidationStage,
)
from .record_store import RecordStoreProtocol

logger = logging.getLogger(__name__)

Check = Callable[[ValidationRequest], Optional[ValidationResult]]


class AvailabilityValidator:
    """
    Decides whether a proposed availability window may be saved.

    Checks run cheapest first and stop at the first failure:
    ASSIGNMENT -> TIME -> CONFLICT -> BOOKING_IMPACT -> VALID.
    Each check returns ``None`` to pass or a failed ``ValidationResult``.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        timezone: str = "UTC",
        blocking_statuses: Sequence[str] = ("confirmed",),
    ) -> None:
        self._store = store
        self._timezone = timezone
        self._blocking_statuses = list(blocking_statuses)
        self._scanner = ConflictScanner()

    def validate(self, request: ValidationRequest) -> ValidationResult:
        """Run every check in order and return the first failure or success."""
        for stage, check in self._pipeline():
            failure = check(request)
            if failure is not None:
                logger.info(
                    "Availability rejected at %s for member %s shop %s on %s: %s",
                    stage.value,
                    request.team_member_id,
                    request.shop_id,
                    request.date,
                    failure.error_code.value if failure.error_code else "-",
                )
                return failure
            logger.debug("Stage %s passed", stage.value)

        return ValidationResult.success()

    def _pipeline(self) -> List[Tuple[ValidationStage, Check]]:
        return [
            (ValidationStage.ASSIGNMENT, self.check_assignment),
            (ValidationStage.TIME, self.check_time),
            (ValidationStage.CONFLICT, self.check_conflicts),
            (ValidationStage.BOOKING_IMPACT, self.check_booking_impact),
        ]

    def check_assignment(self, request: ValidationRequest) -> Optional[ValidationResult]:
        """Fail unless the member holds an active assignment to the shop."""
        assignment = self._store.get_active_assignment(
            team_member_id=request.team_member_id,
            shop_id=request.shop_id,
        )
        if assignment is not None and assignment.is_active:
            return None

        return ValidationResult.failure(
            stage=ValidationStage.ASSIGNMENT,
            error_code=ErrorCode.NOT_ASSIGNED,
            error="Team member is not assigned to this shop",
        )

    @staticmethod
    def check_time(request: ValidationRequest) -> Optional[ValidationResult]:
        """Fail zero-length and inverted windows. No store access."""
        if request.start_time < request.end_time:
            return None

        return ValidationResult.failure(
            stage=ValidationStage.TIME,
            error_code=ErrorCode.INVALID_TIME,
            error="End time must be after start time",
        )

    def check_conflicts(self, request: ValidationRequest) -> Optional[ValidationResult]:
        """Fail when the window overlaps the member's slots at other shops."""
        conflicts = self.find_conflicts(request)
        if not conflicts:
            return None

        descriptors = [
            ConflictDescriptor(
                shop_name=self._shop_label(slot.shop_id),
                time=slot.format_window(),
            )
            for slot in conflicts
        ]

        return ValidationResult.failure(
            stage=ValidationStage.CONFLICT,
            error_code=ErrorCode.CONFLICT,
            error=f"Conflict: Team member already scheduled at {descriptors[0].shop_name}",
            conflicts=descriptors,
        )

    def find_conflicts(self, request: ValidationRequest) -> List[AvailabilitySlot]:
        """Return the member's active slots at other shops overlapping the window."""
        proposed = TimeWindow(request.start_time, request.end_time)
        candidates = self._store.list_active_slots(
            team_member_id=request.team_member_id,
            day=request.date,
        )
        same_day = [slot for slot in candidates if slot.date == request.date]

        return self._scanner.find_conflicts(
            proposed=proposed,
            candidates=same_day,
            shop_id=request.shop_id,
            exclude_id=request.exclude_id,
        )

    def check_booking_impact(self, request: ValidationRequest) -> Optional[ValidationResult]:
        """
        Fail when the slot being edited still holds blocking bookings.

        Conservative: any booking starting inside the slot's *current* bounds
        blocks the change, whether or not the proposed window still covers it.
        """
        if request.exclude_id is None:
            return None

        count = self.count_affected_bookings(request)
        if count == 0:
            return None

        return ValidationResult.failure(
            stage=ValidationStage.BOOKING_IMPACT,
            error_code=ErrorCode.HAS_BOOKINGS,
            error=f"Cannot modify: {count} booking(s) exist in this time slot",
            bookings_count=count,
        )

    def count_affected_bookings(self, request: ValidationRequest) -> int:
        """Count blocking bookings inside the current bounds of the excluded slot."""
        if request.exclude_id is None:
            return 0

        current = self._store.get_slot(request.exclude_id)
        if current is None:
            logger.warning(
                "Slot %s named for exclusion does not exist; nothing to protect",
                request.exclude_id,
            )
            return 0

        # Current bounds are taken on the requested date
        window = TimeRange.on_date(request.date, current.window(), self._timezone)
        logger.debug("Counting bookings for slot %s in %s", current.id, window)
        bookings = self._store.list_bookings(
            team_member_id=request.team_member_id,
            shop_id=request.shop_id,
            starts_from=window.start,
            starts_before=window.end,
            statuses=self._blocking_statuses,
        )

        return len(bookings)

    def _shop_label(self, shop_id: str) -> str:
        shop = self._store.get_shop(shop_id)
        if shop is None:
            logger.warning("Conflicting slot references unknown shop %s", shop_id)
            return shop_id
        return shop.name


def describe_window(request: ValidationRequest) -> str:
    """Human-readable summary of a request's window."""
    return f"{request.date.isoformat()} {format_time_window(request.start_time, request.end_time)}"
