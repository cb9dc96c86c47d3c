"""
Service layer helpers that orchestrate store reads and domain logic.
"""

from .authorization import AuthorizationGate
from .availability_service import AvailabilityValidationService, ServiceResponse
from .availability_validator import AvailabilityValidator
from .record_store import RecordStoreProtocol

__all__ = [
    "AuthorizationGate",
    "AvailabilityValidationService",
    "AvailabilityValidator",
    "RecordStoreProtocol",
    "ServiceResponse",
]
