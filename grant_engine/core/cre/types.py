"""Pydantic models for composite readiness (CRE) scoring."""

from enum import Enum

from pydantic import BaseModel, Field


class Domain(str, Enum):
    """Evaluated dimension of a grant application."""

    HYPOTHESIS_CLARITY = "hypothesisClarity"
    NOVELTY = "novelty"
    MECHANISTIC_DEPTH = "mechanisticDepth"
    STATISTICAL_RIGOR = "statisticalRigor"
    FEASIBILITY = "feasibility"
    FUNDING_ALIGNMENT = "fundingAlignment"


class ReadinessStatus(str, Enum):
    """Three-level readiness classification derived from the overall score."""

    COMPETITIVE = "competitive"  # 75-100
    NEEDS_REVISION = "needs_revision"  # 55-74
    HIGH_RISK = "high_risk"  # 0-54


class ScoreIssue(str, Enum):
    """Why a judged score was not taken at face value."""

    MISSING = "missing"
    NON_NUMERIC = "non_numeric"
    OUT_OF_RANGE = "out_of_range"


class DomainScore(BaseModel):
    """One judged dimension of a grant application."""

    domain: Domain = Field(..., description="Which dimension was judged")
    score: int = Field(..., ge=0, le=100, description="Judged score out of 100")
    reasoning: str = Field(default="", description="Judge's explanation, display only")


class DomainContribution(BaseModel):
    """How a single domain fed into the composite score."""

    score: int = Field(..., ge=0, le=100, description="Score after coercion")
    weight: float = Field(..., ge=0, le=1, description="Fixed weight for this domain")
    weighted_score: float = Field(..., description="score * weight")
    reasoning: str = Field(default="", description="Judge's explanation, passed through")
    issue: ScoreIssue | None = Field(
        None, description="Set when the raw value was missing or coerced"
    )


class CompositeResult(BaseModel):
    """Snapshot of one composite readiness computation."""

    overall_score: int = Field(..., ge=0, le=100, description="Weighted overall score")
    readiness_status: ReadinessStatus = Field(..., description="Classification of overall_score")
    domains: dict[str, DomainContribution] = Field(
        default_factory=dict, description="Per-domain breakdown keyed by domain name"
    )

    @property
    def missing_domains(self) -> list[str]:
        return [
            name for name, d in self.domains.items() if d.issue == ScoreIssue.MISSING
        ]

    @property
    def invalid_domains(self) -> list[str]:
        return [
            name
            for name, d in self.domains.items()
            if d.issue in (ScoreIssue.NON_NUMERIC, ScoreIssue.OUT_OF_RANGE)
        ]


# =============================================================================
# Domain weights - must sum to 1.0
# =============================================================================

DOMAIN_WEIGHTS: dict[str, float] = {
    Domain.HYPOTHESIS_CLARITY.value: 0.20,
    Domain.NOVELTY.value: 0.20,
    Domain.MECHANISTIC_DEPTH.value: 0.15,
    Domain.STATISTICAL_RIGOR.value: 0.15,
    Domain.FEASIBILITY.value: 0.15,
    Domain.FUNDING_ALIGNMENT.value: 0.15,
}

COMPETITIVE_THRESHOLD = 75
NEEDS_REVISION_THRESHOLD = 55
