"""
Mock record store for running without the hosted database.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pendulum import DateTime

from ..domain.models import AvailabilitySlot, Booking, Shop, ShopAssignment
from .record_parsing import (
    parse_assignment,
    parse_booking,
    parse_shop,
    parse_slot,
)

Tables = Dict[str, List[Dict[str, Any]]]

TABLE_NAMES = ("shops", "shop_team_members", "availability_slots", "bookings", "users")


class MockRecordStore:
    """
    Mock store that answers the same reads as ``SupabaseRecordStore``.

    Rows use the hosted table layout and are loaded from
    mock_store_data.json unless tables are passed in directly.
    """

    def __init__(
        self,
        tables: Optional[Tables] = None,
        data_file: Optional[Path] = None,
        timezone: str = "UTC"
    ):
        """
        Initialize the mock store.

        Args:
            tables: Rows keyed by table name; overrides the data file
            data_file: Optional JSON fixture path
            timezone: Timezone used for naive booking timestamps
        """
        self.timezone = timezone
        self.calls: List[str] = []
        self.tables: Tables = {name: [] for name in TABLE_NAMES}

        if tables is None:
            tables = self._load_tables(data_file)

        for name, rows in tables.items():
            self.tables[name] = list(rows)

    @staticmethod
    def _load_tables(data_file: Optional[Path]) -> Tables:
        """Load mock rows from the JSON fixture."""
        path = data_file or Path(__file__).parent / "mock_store_data.json"

        if not path.exists():
            return {}

        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_active_assignment(
        self,
        team_member_id: str,
        shop_id: str
    ) -> Optional[ShopAssignment]:
        self.calls.append("get_active_assignment")
        for row in self.tables["shop_team_members"]:
            if (
                row.get("team_member_id") == team_member_id
                and row.get("shop_id") == shop_id
                and row.get("is_active") is True
            ):
                return parse_assignment(row)
        return None

    def list_active_assignments(
        self,
        shop_id: str,
        team_member_ids: Sequence[str]
    ) -> List[ShopAssignment]:
        self.calls.append("list_active_assignments")
        wanted = set(team_member_ids)
        return [
            parse_assignment(row)
            for row in self.tables["shop_team_members"]
            if row.get("shop_id") == shop_id
            and row.get("team_member_id") in wanted
            and row.get("is_active") is True
        ]

    def list_active_slots(
        self,
        team_member_id: str,
        day: date
    ) -> List[AvailabilitySlot]:
        self.calls.append("list_active_slots")
        slots = [
            parse_slot(row)
            for row in self.tables["availability_slots"]
            if row.get("team_member_id") == team_member_id
            and row.get("date") == day.isoformat()
            and row.get("is_available") is True
        ]
        return sorted(slots, key=lambda slot: slot.start_time)

    def get_slot(self, slot_id: str) -> Optional[AvailabilitySlot]:
        self.calls.append("get_slot")
        for row in self.tables["availability_slots"]:
            if row.get("id") == slot_id:
                return parse_slot(row)
        return None

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        self.calls.append("get_shop")
        for row in self.tables["shops"]:
            if row.get("id") == shop_id:
                return parse_shop(row)
        return None

    def list_bookings(
        self,
        team_member_id: str,
        shop_id: str,
        starts_from: DateTime,
        starts_before: DateTime,
        statuses: Sequence[str]
    ) -> List[Booking]:
        self.calls.append("list_bookings")
        wanted = {status.lower() for status in statuses}
        bookings: List[Booking] = []

        for row in self.tables["bookings"]:
            if row.get("team_member_id") != team_member_id or row.get("shop_id") != shop_id:
                continue

            booking = parse_booking(row, self.timezone)
            if booking.status in wanted and starts_from.timestamp() <= booking.starts_at.timestamp() < starts_before.timestamp():
                bookings.append(booking)

        return sorted(bookings, key=lambda booking: booking.starts_at)

    def get_user_role(self, identity_id: str) -> Optional[str]:
        self.calls.append("get_user_role")
        for row in self.tables["users"]:
            if row.get("clerk_id") == identity_id:
                return row.get("role")
        return None

    def test_connection(self) -> Dict[str, Any]:
        """
        Mock connection test.

        Returns:
            Mock endpoint summary
        """
        return {"url": "mock://slotguard", "shops": len(self.tables["shops"])}
