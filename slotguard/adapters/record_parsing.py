"""
Conversion of raw store rows into domain records.

Rows come back from the REST API (or the mock fixture) as plain dicts with
ISO strings. A row that cannot be parsed raises ``StoreError``: a validator
that silently skipped a malformed slot could approve a real conflict.
"""

from datetime import date, time
from typing import Any, Dict

import pendulum
from pendulum import DateTime

from ..domain.exceptions import StoreError
from ..domain.models import AvailabilitySlot, Booking, Shop, ShopAssignment


def parse_shop(row: Dict[str, Any]) -> Shop:
    try:
        return Shop(
            id=str(row["id"]),
            name=str(row["name"]),
            is_active=bool(row.get("is_active", True))
        )
    except KeyError as exc:
        raise StoreError(f"Malformed shop row, missing {exc}") from exc


def parse_assignment(row: Dict[str, Any]) -> ShopAssignment:
    try:
        return ShopAssignment(
            team_member_id=str(row["team_member_id"]),
            shop_id=str(row["shop_id"]),
            is_active=bool(row.get("is_active", False))
        )
    except KeyError as exc:
        raise StoreError(f"Malformed shop assignment row, missing {exc}") from exc


def parse_slot(row: Dict[str, Any]) -> AvailabilitySlot:
    """
    Parse an ``availability_slots`` row.

    The store names the active flag ``is_available``.
    """
    try:
        return AvailabilitySlot(
            id=str(row["id"]),
            team_member_id=str(row["team_member_id"]),
            shop_id=str(row["shop_id"]),
            date=date.fromisoformat(row["date"]),
            start_time=parse_time_of_day(row["start_time"]),
            end_time=parse_time_of_day(row["end_time"]),
            is_active=bool(row.get("is_available", row.get("is_active", False)))
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise StoreError(f"Malformed availability slot row {row.get('id')!r}: {exc}") from exc


def parse_time_of_day(value: str) -> time:
    """Parse a wall-clock time column. Offsets are rejected."""
    parsed = time.fromisoformat(value)
    if parsed.tzinfo is not None:
        raise ValueError(f"time of day {value!r} must not carry a UTC offset")
    return parsed


def parse_booking(row: Dict[str, Any], timezone: str = "UTC") -> Booking:
    try:
        client_id = row.get("client_id")
        return Booking(
            id=str(row["id"]),
            booking_number=str(row.get("booking_number", "")),
            client_id=str(client_id) if client_id is not None else None,
            team_member_id=str(row["team_member_id"]),
            shop_id=str(row["shop_id"]),
            starts_at=parse_timestamp(row["starts_at"], timezone),
            ends_at=parse_timestamp(row["ends_at"], timezone),
            status=str(row["status"]).lower()
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise StoreError(f"Malformed booking row {row.get('id')!r}: {exc}") from exc


def parse_timestamp(value: str, timezone: str = "UTC") -> DateTime:
    """
    Parse an ISO 8601 timestamp; naive values are read in ``timezone``.

    Raises:
        ValueError: If the value is not a full datetime
    """
    parsed = pendulum.parse(value, tz=timezone)

    if isinstance(parsed, DateTime):
        return parsed

    raise ValueError(f"Could not parse timestamp: {value}")
