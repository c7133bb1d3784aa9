"""Shared FastAPI dependencies."""

from grant_engine.core.usage_limits import SupabaseUsageStore, UsageStore
from grant_engine.db.supabase_client import get_supabase


def get_usage_store() -> UsageStore:
    """Usage counters shared by every server instance (override in tests)."""
    return SupabaseUsageStore(get_supabase())
