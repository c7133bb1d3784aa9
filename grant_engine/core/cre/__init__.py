"""Composite readiness (CRE) scoring.

Combines six judged domains into one grant competitiveness score:
- Hypothesis Clarity (20%)
- Novelty (20%)
- Mechanistic Depth (15%)
- Statistical Rigor (15%)
- Feasibility (15%)
- Funding Alignment (15%)

Usage:
    from grant_engine.core.cre import compute_composite

    result = compute_composite({"novelty": {"score": 82, "reasoning": "..."}})
    print(f"{result.readiness_status.value} ({result.overall_score})")
"""

from grant_engine.core.cre.score import classify_readiness, coerce_score, compute_composite
from grant_engine.core.cre.types import (
    COMPETITIVE_THRESHOLD,
    DOMAIN_WEIGHTS,
    NEEDS_REVISION_THRESHOLD,
    CompositeResult,
    Domain,
    DomainContribution,
    DomainScore,
    ReadinessStatus,
    ScoreIssue,
)

__all__ = [
    "compute_composite",
    "classify_readiness",
    "coerce_score",
    "CompositeResult",
    "Domain",
    "DomainContribution",
    "DomainScore",
    "ReadinessStatus",
    "ScoreIssue",
    "DOMAIN_WEIGHTS",
    "COMPETITIVE_THRESHOLD",
    "NEEDS_REVISION_THRESHOLD",
]
