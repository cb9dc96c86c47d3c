"""Shared test fixtures and row builders."""

from typing import Any, Dict, List, Optional

import pytest

from slotguard.adapters.authorization import StaticAuthorizationGate
from slotguard.adapters.mock_record_store import MockRecordStore
from slotguard.services.availability_service import AvailabilityValidationService
from slotguard.services.availability_validator import AvailabilityValidator

DAY = "2024-06-01"


def shop_row(shop_id: str, name: str) -> Dict[str, Any]:
    return {"id": shop_id, "name": name, "is_active": True}


def assignment_row(member_id: str, shop_id: str, is_active: bool = True) -> Dict[str, Any]:
    return {"team_member_id": member_id, "shop_id": shop_id, "is_active": is_active}


def slot_row(
    slot_id: str,
    member_id: str,
    shop_id: str,
    start: str,
    end: str,
    day: str = DAY,
    is_available: bool = True,
) -> Dict[str, Any]:
    return {
        "id": slot_id,
        "team_member_id": member_id,
        "shop_id": shop_id,
        "date": day,
        "start_time": start,
        "end_time": end,
        "is_available": is_available,
    }


def booking_row(
    booking_id: str,
    member_id: str,
    shop_id: str,
    starts_at: str,
    ends_at: str,
    status: str = "confirmed",
) -> Dict[str, Any]:
    return {
        "id": booking_id,
        "booking_number": f"BK-{booking_id}",
        "client_id": "client-1",
        "team_member_id": member_id,
        "shop_id": shop_id,
        "starts_at": starts_at,
        "ends_at": ends_at,
        "status": status,
    }


def make_store(
    shops: Optional[List[Dict[str, Any]]] = None,
    assignments: Optional[List[Dict[str, Any]]] = None,
    slots: Optional[List[Dict[str, Any]]] = None,
    bookings: Optional[List[Dict[str, Any]]] = None,
    users: Optional[List[Dict[str, Any]]] = None,
) -> MockRecordStore:
    """Build an in-memory store from row lists."""
    return MockRecordStore(
        tables={
            "shops": shops or [shop_row("shop-x", "Shop X"), shop_row("shop-y", "Shop Y")],
            "shop_team_members": assignments or [],
            "availability_slots": slots or [],
            "bookings": bookings or [],
            "users": users or [],
        }
    )


def make_request(**overrides: Any) -> Dict[str, Any]:
    """A valid request body for member tm-1 at shop-x."""
    payload: Dict[str, Any] = {
        "team_member_id": "tm-1",
        "shop_id": "shop-x",
        "date": DAY,
        "start_time": "09:00",
        "end_time": "12:00",
    }
    payload.update(overrides)
    return payload


def make_service(store: MockRecordStore, admin_ids=("admin-1",)) -> AvailabilityValidationService:
    validator = AvailabilityValidator(store=store)
    return AvailabilityValidationService(
        validator=validator,
        store=store,
        gate=StaticAuthorizationGate(admin_ids),
    )


@pytest.fixture
def two_shop_store() -> MockRecordStore:
    """tm-1 works at shop X 09:00-12:00 and is assigned to both X and Y."""
    return make_store(
        assignments=[
            assignment_row("tm-1", "shop-x"),
            assignment_row("tm-1", "shop-y"),
        ],
        slots=[slot_row("slot-x", "tm-1", "shop-x", "09:00:00", "12:00:00")],
    )
