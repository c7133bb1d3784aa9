"""API endpoints for the funding mechanism catalog."""

from fastapi import APIRouter, Query

from grant_engine.core.mechanisms import Agency, Mechanism, list_mechanisms

router = APIRouter()


@router.get("/mechanisms", response_model=list[Mechanism])
async def get_mechanisms(
    agency: Agency | None = Query(None, description="Filter by funding agency"),
) -> list[Mechanism]:
    """List supported funding mechanisms."""
    return list_mechanisms(agency)
