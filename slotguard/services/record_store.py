"""
Read-only view of the record store needed by the validation core.

The validator depends on this protocol rather than on a concrete client, so
the hosted REST adapter and the fixture-backed mock are interchangeable.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.models import AvailabilitySlot, Booking, Shop, ShopAssignment


class RecordStoreProtocol(Protocol):
    """Protocol describing the store reads needed by the validator."""

    def get_active_assignment(
        self,
        team_member_id: str,
        shop_id: str,
    ) -> Optional[ShopAssignment]:
        """Return the active assignment for the pair, if any."""

    def list_active_assignments(
        self,
        shop_id: str,
        team_member_ids: Sequence[str],
    ) -> List[ShopAssignment]:
        """Return active assignments of the given members to a shop."""

    def list_active_slots(
        self,
        team_member_id: str,
        day: date,
    ) -> List[AvailabilitySlot]:
        """Return the member's active slots on a date, across all shops."""

    def get_slot(self, slot_id: str) -> Optional[AvailabilitySlot]:
        """Return a slot by id regardless of its active flag."""

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        """Return a shop by id."""

    def list_bookings(
        self,
        team_member_id: str,
        shop_id: str,
        starts_from: DateTime,
        starts_before: DateTime,
        statuses: Sequence[str],
    ) -> List[Booking]:
        """Return bookings starting in ``[starts_from, starts_before)`` with a given status."""

    def get_user_role(self, identity_id: str) -> Optional[str]:
        """Return the role recorded for an identity-provider user id."""
