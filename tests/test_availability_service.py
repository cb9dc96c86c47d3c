"""
Tests for the AvailabilityValidationService request handling layer.
"""

import pytest

from slotguard.adapters.authorization import RoleAuthorizationGate
from slotguard.domain.exceptions import StoreError
from slotguard.domain.schemas import ValidationRequest
from slotguard.services.availability_service import AvailabilityValidationService
from slotguard.services.availability_validator import AvailabilityValidator
from tests.conftest import (
    assignment_row,
    make_request,
    make_service,
    make_store,
    slot_row,
)


class FailingStore:
    """Stub store whose every read fails like an unreachable database."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreError(f"{name}: connection refused")
        return _fail


class ExplodingStore:
    """Stub store failing with an error the adapters never wrap."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RuntimeError(f"{name}: driver crashed")
        return _fail


class TestHandle:
    """Status mapping for single validations."""

    def test_missing_caller_is_unauthorized(self, two_shop_store):
        response = make_service(two_shop_store).handle(None, make_request())

        assert response.status_code == 401
        assert response.body == {"error": "Unauthorized"}

    def test_non_admin_is_forbidden(self, two_shop_store):
        response = make_service(two_shop_store).handle("someone-else", make_request())

        assert response.status_code == 403

    def test_valid_request(self, two_shop_store):
        response = make_service(two_shop_store).handle("admin-1", make_request(exclude_id="slot-x"))

        assert response.status_code == 200
        assert response.ok
        assert response.body == {"valid": True, "message": "Availability is valid"}

    def test_domain_failure_is_400_with_code(self, two_shop_store):
        response = make_service(two_shop_store).handle(
            "admin-1",
            make_request(shop_id="shop-y", start_time="11:00", end_time="13:00"),
        )

        assert response.status_code == 400
        assert response.body == {
            "valid": False,
            "error": "Conflict: Team member already scheduled at Shop X",
            "error_code": "CONFLICT",
            "conflicts": [{"shop_name": "Shop X", "time": "09:00 - 12:00"}],
        }

    def test_unknown_field_is_rejected(self, two_shop_store):
        response = make_service(two_shop_store).handle("admin-1", make_request(is_recurring=True))

        assert response.status_code == 422
        assert response.body["error"] == "Invalid request"
        assert response.body["details"][0]["field"] == "is_recurring"

    def test_missing_field_is_rejected(self, two_shop_store):
        payload = make_request()
        del payload["end_time"]

        response = make_service(two_shop_store).handle("admin-1", payload)

        assert response.status_code == 422
        assert [d["field"] for d in response.body["details"]] == ["end_time"]

    def test_unparseable_time_is_rejected(self, two_shop_store):
        response = make_service(two_shop_store).handle("admin-1", make_request(start_time="nine"))

        assert response.status_code == 422

    def test_non_mapping_body_is_rejected(self, two_shop_store):
        response = make_service(two_shop_store).handle("admin-1", ["not", "a", "dict"])

        assert response.status_code == 422

    def test_blank_exclude_id_is_absent(self, two_shop_store):
        response = make_service(two_shop_store).handle("admin-1", make_request(exclude_id=""))

        assert response.status_code == 200

    def test_store_failure_is_generic_500(self):
        store = FailingStore()
        service = AvailabilityValidationService(
            validator=AvailabilityValidator(store=store),
            store=store,
            gate=RoleAuthorizationGate(store=make_store(users=[{"clerk_id": "admin-1", "role": "admin"}])),
        )

        response = service.handle("admin-1", make_request())

        assert response.status_code == 500
        assert response.body == {"error": "Internal server error"}

    def test_gate_store_failure_is_generic_500(self, two_shop_store):
        service = AvailabilityValidationService(
            validator=AvailabilityValidator(store=two_shop_store),
            store=two_shop_store,
            gate=RoleAuthorizationGate(store=FailingStore()),
        )

        assert service.handle("admin-1", make_request()).status_code == 500

    def test_validate_propagates_store_errors(self):
        store = FailingStore()
        service = make_service(store)

        with pytest.raises(StoreError):
            service.validate(ValidationRequest.model_validate(make_request()))

    def test_unexpected_failure_is_generic_500(self, caplog):
        service = make_service(ExplodingStore())

        response = service.handle("admin-1", make_request())

        assert response.status_code == 500
        assert response.body == {"error": "Internal server error"}
        assert "driver crashed" in caplog.text

    def test_mixed_offset_times_are_rejected(self, two_shop_store):
        response = make_service(two_shop_store).handle(
            "admin-1",
            make_request(start_time="09:00+02:00", end_time="12:00"),
        )

        assert response.status_code == 422
        assert [d["field"] for d in response.body["details"]] == ["start_time"]

    def test_offset_times_are_not_coerced(self, two_shop_store):
        """12:00+02:00 would silently read as 12:00 local and miss the X slot."""
        response = make_service(two_shop_store).handle(
            "admin-1",
            make_request(shop_id="shop-y", start_time="12:00+02:00", end_time="13:00+02:00"),
        )

        assert response.status_code == 422
        assert [d["field"] for d in response.body["details"]] == ["start_time", "end_time"]


class TestRoleAuthorizationGate:

    def test_admin_role_passes(self):
        store = make_store(users=[{"clerk_id": "user_1", "role": "admin"}])

        assert RoleAuthorizationGate(store).is_admin("user_1")

    def test_client_role_fails(self):
        store = make_store(users=[{"clerk_id": "user_1", "role": "client"}])

        assert not RoleAuthorizationGate(store).is_admin("user_1")

    def test_unknown_user_fails(self):
        assert not RoleAuthorizationGate(make_store()).is_admin("user_1")


def _batch(**overrides):
    payload = {
        "shop_id": "shop-y",
        "team_member_ids": ["tm-1", "tm-2"],
        "date_range": {"start": "2024-06-01", "end": "2024-06-02"},
        "time_slots": [{"start_time": "11:00", "end_time": "13:00"}],
        "days_of_week": [0, 6],  # Sunday, Saturday
    }
    payload.update(overrides)
    return payload


class TestPlanBatch:
    """Bulk planning mirrors the single check without writing anything."""

    def _store(self):
        return make_store(
            assignments=[
                assignment_row("tm-1", "shop-x"),
                assignment_row("tm-1", "shop-y"),
                assignment_row("tm-2", "shop-y"),
            ],
            slots=[slot_row("slot-x", "tm-1", "shop-x", "09:00:00", "12:00:00")],
        )

    def test_unassigned_members_are_listed(self):
        response = make_service(self._store()).plan_batch(
            "admin-1",
            _batch(team_member_ids=["tm-1", "tm-3", "tm-4"]),
        )

        assert response.status_code == 400
        assert response.body["unassigned_ids"] == ["tm-3", "tm-4"]

    def test_conflicting_candidates_are_skipped(self):
        response = make_service(self._store()).plan_batch("admin-1", _batch())

        assert response.status_code == 200
        body = response.body
        # 2024-06-01 is a Saturday, 2024-06-02 a Sunday
        assert body["planned_count"] == 3
        assert body["team_members_count"] == 2
        assert body["date_range"] == {"start": "2024-06-01", "end": "2024-06-02"}
        assert body["skipped"] == [
            {
                "team_member_id": "tm-1",
                "shop_id": "shop-y",
                "date": "2024-06-01",
                "start_time": "11:00:00",
                "end_time": "13:00:00",
                "error_code": "CONFLICT",
                "error": "Conflict: Team member already scheduled at Shop X",
            }
        ]

    def test_weekday_filter(self):
        response = make_service(self._store()).plan_batch("admin-1", _batch(days_of_week=[0]))

        assert {slot["date"] for slot in response.body["planned"]} == {"2024-06-02"}

    def test_invalid_windows_are_skipped(self):
        response = make_service(self._store()).plan_batch(
            "admin-1",
            _batch(time_slots=[{"start_time": "13:00", "end_time": "13:00"}], days_of_week=[0]),
        )

        assert response.body["planned_count"] == 0
        assert response.body["message"] == "No slots planned - all would conflict"
        assert {slot["error_code"] for slot in response.body["skipped"]} == {"INVALID_TIME"}

    def test_inverted_date_range_is_rejected(self):
        response = make_service(self._store()).plan_batch(
            "admin-1",
            _batch(date_range={"start": "2024-06-02", "end": "2024-06-01"}),
        )

        assert response.status_code == 422

    def test_offset_time_slot_is_rejected(self):
        response = make_service(self._store()).plan_batch(
            "admin-1",
            _batch(time_slots=[{"start_time": "11:00+02:00", "end_time": "13:00"}]),
        )

        assert response.status_code == 422

    def test_out_of_range_weekday_is_rejected(self):
        response = make_service(self._store()).plan_batch("admin-1", _batch(days_of_week=[7]))

        assert response.status_code == 422

    def test_requires_admin(self):
        response = make_service(self._store()).plan_batch("someone-else", _batch())

        assert response.status_code == 403
