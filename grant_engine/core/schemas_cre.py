"""Pydantic schemas for composite readiness (CRE) scoring requests and judge output."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from grant_engine.core.cre.types import (
    DomainContribution,
    DomainScore,
    ReadinessStatus,
    ScoreIssue,
)


class MechanisticClassification(str, Enum):
    """How far the proposed work goes beyond description toward causation."""

    DESCRIPTIVE = "descriptive"
    ASSOCIATIVE = "associative"
    MECHANISTIC = "mechanistic"
    CAUSAL_INTERVENTION = "causal_intervention"


# =============================================================================
# Judge output
# =============================================================================


class DomainJudgement(BaseModel):
    """Decoded judge response: typed domain scores plus review notes."""

    domain_scores: dict[str, DomainScore] = Field(
        default_factory=dict, description="Decoded scores keyed by domain name"
    )
    missing_domains: list[str] = Field(
        default_factory=list, description="Domains absent from the judge response"
    )
    invalid_domains: list[str] = Field(
        default_factory=list, description="Domains whose score had to be coerced"
    )
    domain_issues: dict[str, ScoreIssue] = Field(
        default_factory=dict, description="Why each invalid domain was coerced"
    )
    mechanistic_classification: MechanisticClassification | None = None
    key_strengths: list[str] = Field(default_factory=list)
    critical_weaknesses: list[str] = Field(default_factory=list)
    revision_priorities: list[str] = Field(
        default_factory=list, description="Ordered list of what to fix first"
    )

    @property
    def is_complete(self) -> bool:
        return not self.missing_domains and not self.invalid_domains


class JudgeUsage(BaseModel):
    """Token accounting for one judge call."""

    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    duration_ms: int = 0


class JudgeResult(BaseModel):
    """Decoded judgement together with the cost of obtaining it."""

    judgement: DomainJudgement
    usage: JudgeUsage


# =============================================================================
# API
# =============================================================================


class CreScoreRequest(BaseModel):
    """Request body for POST /cre-score."""

    title: str = Field(default="", description="Application title")
    specific_aims: str = Field(default="", description="Specific Aims text")
    research_strategy: str = Field(default="", description="Research Strategy text")
    hypothesis: str | None = Field(None, description="Central hypothesis, if stated separately")
    mechanism: str = Field(..., description="Funding mechanism id (e.g., 'R01')")
    application_id: UUID | None = Field(
        None, description="Application to append the score to; omit to score without saving"
    )


class CreScoreResponse(BaseModel):
    """Composite readiness result plus per-domain detail."""

    overall_score: int = Field(..., ge=0, le=100)
    readiness_status: ReadinessStatus
    domains: dict[str, DomainContribution]
    weights: dict[str, float]
    mechanism: str
    mechanistic_classification: MechanisticClassification | None = None
    key_strengths: list[str] = Field(default_factory=list)
    critical_weaknesses: list[str] = Field(default_factory=list)
    revision_priorities: list[str] = Field(default_factory=list)
    evaluation_complete: bool = Field(
        ..., description="False when any domain was missing or malformed in the judge response"
    )
    incomplete_domains: list[str] = Field(default_factory=list)
    score_id: str | None = Field(None, description="Id of the stored score row, if saved")
    computed_at: datetime


class CreScoreRecord(BaseModel):
    """A stored composite score row."""

    id: str
    application_id: str
    overall_score: int
    readiness_status: ReadinessStatus
    domain_scores: dict[str, Any] = Field(default_factory=dict)
    mechanism: str | None = None
    evaluation_complete: bool = True
    prompt_version: str | None = None
    computed_at: datetime | None = None
