"""
Authorization gates deciding whether a caller may administer availability.
"""

import logging
from typing import Iterable

from ..services.record_store import RecordStoreProtocol

logger = logging.getLogger(__name__)


class RoleAuthorizationGate:
    """
    Maps an identity-provider user id to its stored role.

    A caller without a ``users`` row is not an admin. Store failures
    propagate so they are reported as infrastructure errors.
    """

    def __init__(self, store: RecordStoreProtocol, admin_role: str = "admin"):
        self._store = store
        self._admin_role = admin_role

    def is_admin(self, caller_id: str) -> bool:
        role = self._store.get_user_role(caller_id)
        if role is None:
            logger.info("Caller %s has no user record", caller_id)
            return False
        return role == self._admin_role


class StaticAuthorizationGate:
    """Gate backed by a fixed set of admin ids (local runs and tests)."""

    def __init__(self, admin_ids: Iterable[str]):
        self._admin_ids = frozenset(admin_ids)

    def is_admin(self, caller_id: str) -> bool:
        return caller_id in self._admin_ids
