"""
Domain-specific exception hierarchy for the slotguard application.
"""


class SlotguardError(Exception):
    """Base class for all application-level errors."""


class StoreError(SlotguardError):
    """Raised when records cannot be fetched from the store or parsed."""


class ConfigurationError(SlotguardError):
    """Raised when the application configuration is missing or incomplete."""
