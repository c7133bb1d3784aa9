"""Database access for grant applications (ownership lookups only)."""

from typing import Any
from uuid import UUID

from grant_engine.db.supabase_client import get_supabase


def get_owned_application(application_id: UUID, user_id: UUID) -> dict[str, Any] | None:
    """Get an application if it belongs to the user, else None."""
    supabase = get_supabase()
    response = (
        supabase.table("applications")
        .select("id, title, mechanism, user_id")
        .eq("id", str(application_id))
        .eq("user_id", str(user_id))
        .limit(1)
        .execute()
    )
    return response.data[0] if response.data else None
