"""API router for v1 endpoints."""

from fastapi import APIRouter

from grant_engine.api import cre_score, mechanisms, usage

router = APIRouter()

# Composite readiness scoring and score history
router.include_router(cre_score.router, tags=["cre_score"])

# Funding mechanism catalog
router.include_router(mechanisms.router, tags=["mechanisms"])

# Per-user LLM usage
router.include_router(usage.router, tags=["usage"])
