"""
Adapters layer - External integrations (hosted record store, authorization).
"""

from .authorization import RoleAuthorizationGate, StaticAuthorizationGate
from .mock_record_store import MockRecordStore
from .supabase_client import SupabaseRecordStore

__all__ = ["MockRecordStore", "RoleAuthorizationGate", "StaticAuthorizationGate", "SupabaseRecordStore"]
