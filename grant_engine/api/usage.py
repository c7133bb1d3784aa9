"""API endpoint for per-user LLM usage stats."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from grant_engine.api.dependencies import get_usage_store
from grant_engine.core.auth_middleware import AuthContext, require_auth
from grant_engine.core.logging import get_logger
from grant_engine.core.usage_limits import UsageStore, get_usage_stats

logger = get_logger(__name__)

router = APIRouter()


@router.get("/usage")
async def get_my_usage(
    auth: AuthContext = Depends(require_auth),  # noqa: B008
    store: UsageStore = Depends(get_usage_store),  # noqa: B008
) -> dict[str, Any]:
    """
    Get today's LLM usage, tier and limits for the current user.

    Raises:
        HTTPException 500: If the usage store cannot be read
    """
    try:
        return get_usage_stats(store, str(auth.user_id))
    except Exception as e:
        logger.exception(f"Failed to load usage stats for user {auth.user_id}")
        raise HTTPException(status_code=500, detail="Failed to load usage stats") from e
