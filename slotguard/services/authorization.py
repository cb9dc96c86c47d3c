"""
Authorization capability consumed by the validation service.
"""

from typing import Protocol


class AuthorizationGate(Protocol):
    """Decides whether an authenticated caller may administer availability."""

    def is_admin(self, caller_id: str) -> bool:
        """Return True if the caller may administer availability."""
