"""
Record store client for the hosted PostgREST API (Supabase).
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from pendulum import DateTime

from ..domain.exceptions import StoreError
from ..domain.models import AvailabilitySlot, Booking, Shop, ShopAssignment
from .record_parsing import (
    parse_assignment,
    parse_booking,
    parse_shop,
    parse_slot,
)

logger = logging.getLogger(__name__)

Params = List[Tuple[str, str]]

SLOT_COLUMNS = "id,team_member_id,shop_id,date,start_time,end_time,is_available"
BOOKING_COLUMNS = "id,booking_number,client_id,team_member_id,shop_id,starts_at,ends_at,status"


class SupabaseRecordStore:
    """
    Read-only client for the salon tables behind the PostgREST endpoint.

    Every call is a single bounded GET; failures surface as ``StoreError``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        timezone: str = "UTC",
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the store client.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service role key used for both apikey and bearer headers
            timeout: Per-request timeout in seconds
            timezone: Timezone used for naive booking timestamps
            session: Optional requests session (connection pooling, tests)
        """
        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.timezone = timezone
        self.session = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json"
        }

    def get_active_assignment(
        self,
        team_member_id: str,
        shop_id: str
    ) -> Optional[ShopAssignment]:
        rows = self._select(
            "shop_team_members",
            [
                ("select", "team_member_id,shop_id,is_active"),
                ("team_member_id", f"eq.{team_member_id}"),
                ("shop_id", f"eq.{shop_id}"),
                ("is_active", "eq.true"),
                ("limit", "1"),
            ]
        )
        return parse_assignment(rows[0]) if rows else None

    def list_active_assignments(
        self,
        shop_id: str,
        team_member_ids: Sequence[str]
    ) -> List[ShopAssignment]:
        if not team_member_ids:
            return []

        rows = self._select(
            "shop_team_members",
            [
                ("select", "team_member_id,shop_id,is_active"),
                ("shop_id", f"eq.{shop_id}"),
                ("team_member_id", _in_filter(team_member_ids)),
                ("is_active", "eq.true"),
            ]
        )
        return [parse_assignment(row) for row in rows]

    def list_active_slots(
        self,
        team_member_id: str,
        day: date
    ) -> List[AvailabilitySlot]:
        rows = self._select(
            "availability_slots",
            [
                ("select", SLOT_COLUMNS),
                ("team_member_id", f"eq.{team_member_id}"),
                ("date", f"eq.{day.isoformat()}"),
                ("is_available", "eq.true"),
                ("order", "start_time.asc"),
            ]
        )
        return [parse_slot(row) for row in rows]

    def get_slot(self, slot_id: str) -> Optional[AvailabilitySlot]:
        rows = self._select(
            "availability_slots",
            [
                ("select", SLOT_COLUMNS),
                ("id", f"eq.{slot_id}"),
                ("limit", "1"),
            ]
        )
        return parse_slot(rows[0]) if rows else None

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        rows = self._select(
            "shops",
            [
                ("select", "id,name,is_active"),
                ("id", f"eq.{shop_id}"),
                ("limit", "1"),
            ]
        )
        return parse_shop(rows[0]) if rows else None

    def list_bookings(
        self,
        team_member_id: str,
        shop_id: str,
        starts_from: DateTime,
        starts_before: DateTime,
        statuses: Sequence[str]
    ) -> List[Booking]:
        rows = self._select(
            "bookings",
            [
                ("select", BOOKING_COLUMNS),
                ("team_member_id", f"eq.{team_member_id}"),
                ("shop_id", f"eq.{shop_id}"),
                ("starts_at", f"gte.{starts_from.to_iso8601_string()}"),
                ("starts_at", f"lt.{starts_before.to_iso8601_string()}"),
                ("status", _in_filter(statuses)),
                ("order", "starts_at.asc"),
            ]
        )
        return [parse_booking(row, self.timezone) for row in rows]

    def get_user_role(self, identity_id: str) -> Optional[str]:
        rows = self._select(
            "users",
            [
                ("select", "role"),
                ("clerk_id", f"eq.{identity_id}"),
                ("limit", "1"),
            ]
        )
        if not rows:
            return None
        role = rows[0].get("role")
        return str(role) if role is not None else None

    def test_connection(self) -> Dict[str, Any]:
        """
        Check that the endpoint answers and the key is accepted.

        Returns:
            Summary with the endpoint URL and the number of shops visible

        Raises:
            StoreError: If the connection test fails
        """
        rows = self._select("shops", [("select", "id")])
        return {"url": self.rest_url, "shops": len(rows)}

    def _select(self, table: str, params: Params) -> List[Dict[str, Any]]:
        """
        Run a filtered GET against a table and return its rows.

        Raises:
            StoreError: On transport errors, HTTP errors or non-list bodies
        """
        url = f"{self.rest_url}/{table}"

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            logger.error("Store query on %s failed: %s", table, e)
            raise StoreError(f"Failed to query {table}: {e}") from e

        except ValueError as e:
            raise StoreError(f"Invalid JSON from {table}: {e}") from e

        if not isinstance(data, list):
            raise StoreError(f"Unexpected response shape from {table}: {type(data).__name__}")

        return data


def _in_filter(values: Sequence[str]) -> str:
    quoted = ",".join(f'"{value}"' for value in values)
    return f"in.({quoted})"
