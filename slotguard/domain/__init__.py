"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflict_scanner import ConflictScanner
from .models import AvailabilitySlot, Booking, Shop, ShopAssignment, TimeRange, TimeWindow
from .schemas import ErrorCode, ValidationRequest, ValidationResult, ValidationStage

__all__ = [
    "AvailabilitySlot",
    "Booking",
    "ConflictScanner",
    "ErrorCode",
    "Shop",
    "ShopAssignment",
    "TimeRange",
    "TimeWindow",
    "ValidationRequest",
    "ValidationResult",
    "ValidationStage",
]
