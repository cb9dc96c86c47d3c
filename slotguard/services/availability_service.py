"""
Request handling for availability validation.

The service is the thin layer the admin UI talks to: it authorizes the
caller, parses the loosely typed body into strict request models, runs the
validator and maps every outcome to a status code and JSON body. Domain
failures are expected answers (400); store and unexpected failures are logged
and hidden behind a generic 500 so the UI can tell "invalid" from "try again later".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..domain.exceptions import StoreError
from ..domain.schemas import (
    BatchPlanRequest,
    PlannedSlot,
    SkippedSlot,
    ValidationRequest,
    ValidationResult,
)
from ..logging_context import get_request_logger, new_request_id
from .authorization import AuthorizationGate
from .availability_validator import AvailabilityValidator, describe_window
from .record_store import RecordStoreProtocol

logger = get_request_logger(__name__)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


@dataclass(frozen=True)
class ServiceResponse:
    """Status code and JSON body returned to the caller."""
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


UNAUTHORIZED = ServiceResponse(401, {"error": "Unauthorized"})
FORBIDDEN = ServiceResponse(403, {"error": "Forbidden"})
INTERNAL_ERROR = ServiceResponse(500, {"error": "Internal server error"})


class AvailabilityValidationService:
    """
    Entry point for validating single windows and planning batches.

    Holds no per-request state; one instance can serve concurrent calls.
    """

    def __init__(
        self,
        validator: AvailabilityValidator,
        store: RecordStoreProtocol,
        gate: AuthorizationGate,
    ) -> None:
        self._validator = validator
        self._store = store
        self._gate = gate

    def validate(self, request: ValidationRequest) -> ValidationResult:
        """Validate an already parsed request. Store errors propagate."""
        return self._validator.validate(request)

    def handle(self, caller_id: Optional[str], payload: Any) -> ServiceResponse:
        """Authorize, parse and validate a single availability window."""
        return self._run(caller_id, payload, ValidationRequest, self._validate_response)

    def plan_batch(self, caller_id: Optional[str], payload: Any) -> ServiceResponse:
        """Authorize, parse and plan a bulk availability request. Nothing is written."""
        return self._run(caller_id, payload, BatchPlanRequest, self._plan_response)

    def _run(
        self,
        caller_id: Optional[str],
        payload: Any,
        model: Type[RequestModel],
        action: Callable[[RequestModel], ServiceResponse],
    ) -> ServiceResponse:
        request_id = new_request_id()

        if not caller_id:
            return UNAUTHORIZED

        try:
            if not self._gate.is_admin(caller_id):
                logger.info("Caller %s is not an admin", caller_id)
                return FORBIDDEN

            try:
                request = model.model_validate(payload)
            except ValidationError as exc:
                return ServiceResponse(
                    422,
                    {"error": "Invalid request", "details": _error_details(exc)},
                )

            return action(request)

        except StoreError as exc:
            logger.error("Store failure while handling %s: %s", request_id, exc)
            return INTERNAL_ERROR

        except Exception:
            logger.exception("Unexpected failure while handling %s", request_id)
            return INTERNAL_ERROR

    def _validate_response(self, request: ValidationRequest) -> ServiceResponse:
        logger.debug(
            "Validating %s for member %s at shop %s",
            describe_window(request),
            request.team_member_id,
            request.shop_id,
        )
        result = self._validator.validate(request)
        return ServiceResponse(200 if result.valid else 400, result.to_response())

    def _plan_response(self, request: BatchPlanRequest) -> ServiceResponse:
        assignments = self._store.list_active_assignments(
            shop_id=request.shop_id,
            team_member_ids=request.team_member_ids,
        )
        assigned = {assignment.team_member_id for assignment in assignments}
        unassigned = [member for member in request.team_member_ids if member not in assigned]

        if unassigned:
            return ServiceResponse(
                400,
                {
                    "error": "Some team members are not assigned to this shop",
                    "unassigned_ids": unassigned,
                },
            )

        planned: List[PlannedSlot] = []
        skipped: List[SkippedSlot] = []

        for day in request.planned_dates():
            for member_id in request.team_member_ids:
                for window in request.time_slots:
                    candidate = ValidationRequest(
                        team_member_id=member_id,
                        shop_id=request.shop_id,
                        date=day,
                        start_time=window.start_time,
                        end_time=window.end_time,
                    )
                    failure = self._validator.check_time(candidate)
                    if failure is None:
                        failure = self._validator.check_conflicts(candidate)

                    slot = PlannedSlot(**candidate.model_dump(exclude={"exclude_id"}))
                    if failure is None:
                        planned.append(slot)
                    else:
                        skipped.append(
                            SkippedSlot(
                                **slot.model_dump(),
                                error_code=failure.error_code,
                                error=failure.error,
                            )
                        )

        if planned:
            message = f"Planned {len(planned)} availability slots"
        else:
            message = "No slots planned - all would conflict"

        logger.info("%s, skipped %d", message, len(skipped))

        return ServiceResponse(
            200,
            {
                "message": message,
                "planned_count": len(planned),
                "planned": [slot.model_dump(mode="json") for slot in planned],
                "skipped": [slot.model_dump(mode="json") for slot in skipped],
                "team_members_count": len(request.team_member_ids),
                "date_range": request.date_range.model_dump(mode="json"),
            },
        )


def _error_details(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "body",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
