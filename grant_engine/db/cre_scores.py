"""Database access layer for composite readiness score history.

Score rows are append-only: each is a record of a score computed at a point
in time and is never updated in place.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from grant_engine.core.cre.types import CompositeResult
from grant_engine.core.logging import get_logger
from grant_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_cre_score(
    application_id: UUID,
    result: CompositeResult,
    computed_at: datetime,
    mechanism: str | None = None,
    evaluation_complete: bool = True,
    prompt_version: str | None = None,
    user_id: UUID | str | None = None,
) -> dict[str, Any]:
    """Append a composite score row for an application."""
    supabase = get_supabase()
    data = {
        "application_id": str(application_id),
        "overall_score": result.overall_score,
        "readiness_status": result.readiness_status.value,
        "domain_scores": {
            name: contribution.model_dump(mode="json")
            for name, contribution in result.domains.items()
        },
        "mechanism": mechanism,
        "evaluation_complete": evaluation_complete,
        "prompt_version": prompt_version,
        "computed_at": computed_at.isoformat(),
    }
    if user_id:
        data["user_id"] = str(user_id)

    response = supabase.table("cre_scores").insert(data).execute()
    if not response.data:
        raise ValueError("Failed to create CRE score")
    logger.info(
        f"Stored CRE score {result.overall_score} ({result.readiness_status.value}) "
        f"for application {application_id}"
    )
    return response.data[0]


def list_cre_scores(
    application_id: UUID, user_id: UUID, limit: int = 20
) -> list[dict[str, Any]]:
    """List the user's score history for an application, newest first."""
    supabase = get_supabase()
    response = (
        supabase.table("cre_scores")
        .select("*")
        .eq("application_id", str(application_id))
        .eq("user_id", str(user_id))
        .order("computed_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []


def get_latest_cre_score(application_id: UUID, user_id: UUID) -> dict[str, Any] | None:
    """Get the user's most recent score for an application."""
    rows = list_cre_scores(application_id, user_id, limit=1)
    return rows[0] if rows else None
