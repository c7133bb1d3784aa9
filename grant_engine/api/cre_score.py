"""API endpoints for composite readiness (CRE) scoring."""

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Query

from grant_engine.api.dependencies import get_usage_store
from grant_engine.chains.score_grant_domains import (
    JudgeDecodeError,
    JudgeUnavailableError,
    score_grant_domains,
)
from grant_engine.core.auth_middleware import AuthContext, require_auth
from grant_engine.core.config import get_settings
from grant_engine.core.cre import DOMAIN_WEIGHTS, Domain, compute_composite
from grant_engine.core.logging import get_logger, log_with_context
from grant_engine.core.mechanisms import get_mechanism
from grant_engine.core.schemas_cre import CreScoreRecord, CreScoreRequest, CreScoreResponse
from grant_engine.core.usage_limits import (
    UsageStore,
    enforce_usage_limit,
    estimate_tokens,
    track_usage,
)
from grant_engine.db.applications import get_owned_application
from grant_engine.db.cre_scores import create_cre_score, get_latest_cre_score, list_cre_scores

logger = get_logger(__name__)

router = APIRouter()

USAGE_ENDPOINT = "cre-score"


def _validate_request(request: CreScoreRequest) -> None:
    """Reject empty or oversized submissions before spending tokens."""
    if not request.specific_aims.strip() and not request.research_strategy.strip():
        raise HTTPException(
            status_code=400,
            detail="Please provide Specific Aims or Research Strategy content",
        )

    max_chars = get_settings().MAX_GRANT_SECTION_CHARS
    sections = {
        "title": request.title,
        "specific_aims": request.specific_aims,
        "research_strategy": request.research_strategy,
        "hypothesis": request.hypothesis or "",
    }
    for name, text in sections.items():
        if len(text) > max_chars:
            raise HTTPException(
                status_code=400,
                detail=f"{name} exceeds {max_chars} characters",
            )


def _require_owned_application(application_id: UUID, auth: AuthContext) -> None:
    """404 unless the application exists and belongs to the caller."""
    if not get_owned_application(application_id, auth.user_id):
        raise HTTPException(status_code=404, detail="Application not found")


@router.post("/cre-score", response_model=CreScoreResponse)
async def score_application(
    request: CreScoreRequest,
    auth: AuthContext = Depends(require_auth),  # noqa: B008
    usage_store: UsageStore = Depends(get_usage_store),  # noqa: B008
) -> CreScoreResponse:
    """
    Score a grant application's readiness across six domains.

    The judge scores each domain, the composite scorer combines them, and
    the result is appended to the application's score history when
    application_id is given. If the judge fails or returns an unreadable
    response no score is computed.

    Raises:
        HTTPException 400: Unknown mechanism, empty or oversized content
        HTTPException 404: application_id not owned by the caller
        HTTPException 429: Daily usage limit reached
        HTTPException 502: Evaluation incomplete (judge unavailable or unreadable)
        HTTPException 500: Unexpected failure
    """
    request_id = str(uuid4())
    user_key = str(auth.user_id)

    mechanism = get_mechanism(request.mechanism)
    if not mechanism:
        raise HTTPException(status_code=400, detail=f"Unknown mechanism: {request.mechanism}")
    _validate_request(request)

    try:
        if request.application_id:
            _require_owned_application(request.application_id, auth)

        prompt_text = "".join(
            [
                request.title,
                request.specific_aims,
                request.research_strategy,
                request.hypothesis or "",
            ]
        )
        enforce_usage_limit(usage_store, user_key, estimated_tokens=estimate_tokens(prompt_text))

        try:
            judge = await score_grant_domains(
                mechanism=mechanism,
                title=request.title,
                specific_aims=request.specific_aims,
                research_strategy=request.research_strategy,
                hypothesis=request.hypothesis,
                user_id=auth.user_id,
                application_id=request.application_id,
            )
        except JudgeUnavailableError as e:
            raise HTTPException(
                status_code=502,
                detail="Evaluation incomplete: the scoring service is unavailable. No score was recorded.",
            ) from e
        except JudgeDecodeError as e:
            if e.usage:
                track_usage(
                    usage_store, user_key, USAGE_ENDPOINT,
                    e.usage.tokens_input, e.usage.tokens_output, e.usage.model,
                )
            raise HTTPException(
                status_code=502,
                detail="Evaluation incomplete: the scoring service returned an unreadable response. No score was recorded.",
            ) from e

        track_usage(
            usage_store, user_key, USAGE_ENDPOINT,
            judge.usage.tokens_input, judge.usage.tokens_output, judge.usage.model,
        )

        judgement = judge.judgement
        result = compute_composite(judgement.domain_scores, issues=judgement.domain_issues)
        computed_at = datetime.now(UTC)

        flagged = set(judgement.missing_domains) | set(judgement.invalid_domains)
        incomplete_domains = [d.value for d in Domain if d.value in flagged]

        score_id = None
        if request.application_id:
            try:
                row = create_cre_score(
                    application_id=request.application_id,
                    result=result,
                    computed_at=computed_at,
                    mechanism=mechanism.id,
                    evaluation_complete=not incomplete_domains,
                    prompt_version=get_settings().CRE_PROMPT_VERSION,
                    user_id=auth.user_id,
                )
                score_id = str(row["id"]) if row.get("id") else None
            except Exception:
                logger.warning(
                    f"Failed to store CRE score for application {request.application_id}, "
                    f"serving live result"
                )

        log_with_context(
            logger,
            logging.INFO,
            f"CRE score computed: {result.overall_score} ({result.readiness_status.value})",
            request_id=request_id,
            mechanism=mechanism.id,
            application_id=str(request.application_id) if request.application_id else None,
            incomplete_domains=len(incomplete_domains),
        )

        return CreScoreResponse(
            overall_score=result.overall_score,
            readiness_status=result.readiness_status,
            domains=result.domains,
            weights=DOMAIN_WEIGHTS,
            mechanism=mechanism.id,
            mechanistic_classification=judgement.mechanistic_classification,
            key_strengths=judgement.key_strengths,
            critical_weaknesses=judgement.critical_weaknesses,
            revision_priorities=judgement.revision_priorities,
            evaluation_complete=not incomplete_domains,
            incomplete_domains=incomplete_domains,
            score_id=score_id,
            computed_at=computed_at,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"CRE scoring failed (request {request_id})")
        raise HTTPException(status_code=500, detail="Scoring failed") from e


@router.get("/applications/{application_id}/cre-scores", response_model=list[CreScoreRecord])
async def get_cre_score_history(
    application_id: UUID,
    limit: int = Query(20, ge=1, le=100, description="Max rows to return"),
    auth: AuthContext = Depends(require_auth),  # noqa: B008
) -> list[CreScoreRecord]:
    """
    Get composite score history for an application, newest first.

    Raises:
        HTTPException 404: If the application is not the caller's
        HTTPException 500: If the history cannot be loaded
    """
    try:
        _require_owned_application(application_id, auth)
        rows = list_cre_scores(application_id, auth.user_id, limit=limit)
        return [CreScoreRecord.model_validate(row) for row in rows]
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load CRE score history for application {application_id}")
        raise HTTPException(status_code=500, detail="Failed to load score history") from e


@router.get(
    "/applications/{application_id}/cre-scores/latest", response_model=CreScoreRecord
)
async def get_latest_application_score(
    application_id: UUID,
    auth: AuthContext = Depends(require_auth),  # noqa: B008
) -> CreScoreRecord:
    """
    Get the most recent composite score for an application.

    Raises:
        HTTPException 404: If the application is not the caller's or has no score yet
    """
    _require_owned_application(application_id, auth)
    row = get_latest_cre_score(application_id, auth.user_id)
    if not row:
        raise HTTPException(status_code=404, detail="No score recorded for this application")
    return CreScoreRecord.model_validate(row)
