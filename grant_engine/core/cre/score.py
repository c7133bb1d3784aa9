"""Composite readiness score computation.

Combines the six judged domain scores into one overall score by a fixed
linear weighting, then classifies the result:
1. Coerce each domain score (missing / non-numeric / NaN -> 0, clamp to 0-100)
2. Weight and sum
3. Round half-up, clamp to 0-100
4. Classify by threshold

Pure: no I/O, no state. Never raises for any input.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

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
from grant_engine.core.logging import get_logger

logger = get_logger(__name__)

_ONE = Decimal("1")
_MISSING = object()


def coerce_score(value: Any) -> tuple[int, ScoreIssue | None]:
    """
    Coerce an untrusted judged score into an integer in [0, 100].

    Numeric strings are accepted. Booleans, NaN, infinities and anything
    non-numeric become 0. Values below 0 become 0, values above 100 become
    100. Fractional scores round half-up.

    Returns:
        (score, issue) where issue is None when the value was taken as-is
    """
    if value is _MISSING:
        return 0, ScoreIssue.MISSING
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        return 0, ScoreIssue.NON_NUMERIC

    try:
        number = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, ValueError):
        return 0, ScoreIssue.NON_NUMERIC

    if not number.is_finite():
        return 0, ScoreIssue.NON_NUMERIC
    if number < 0:
        return 0, ScoreIssue.OUT_OF_RANGE
    if number > 100:
        return 100, ScoreIssue.OUT_OF_RANGE

    return int(number.quantize(_ONE, rounding=ROUND_HALF_UP)), None


def classify_readiness(overall_score: int) -> ReadinessStatus:
    """Map an overall score to its readiness status (first match wins)."""
    if overall_score >= COMPETITIVE_THRESHOLD:
        return ReadinessStatus.COMPETITIVE
    if overall_score >= NEEDS_REVISION_THRESHOLD:
        return ReadinessStatus.NEEDS_REVISION
    return ReadinessStatus.HIGH_RISK


def _lookup(entries: Mapping, domain: Domain) -> Any:
    # Str-enum keys hash by member name, so try both spellings
    if domain.value in entries:
        return entries[domain.value]
    if domain in entries:
        return entries[domain]
    return _MISSING


def _read_domain(entries: Mapping, domain: Domain) -> tuple[int, str, ScoreIssue | None]:
    """Extract (score, reasoning, issue) for one domain from the raw input."""
    entry = _lookup(entries, domain)
    if entry is _MISSING or entry is None:
        return 0, "", ScoreIssue.MISSING

    if isinstance(entry, DomainScore):
        raw, reasoning = entry.score, entry.reasoning
    elif isinstance(entry, Mapping):
        raw = entry.get("score", _MISSING)
        reasoning = entry.get("reasoning")
    else:
        # Bare value: treat the entry itself as the score
        raw, reasoning = entry, ""

    score, issue = coerce_score(raw)
    return score, reasoning if isinstance(reasoning, str) else "", issue


def compute_composite(
    domain_scores: Any, issues: Mapping[str, ScoreIssue] | None = None
) -> CompositeResult:
    """
    Compute the composite readiness score from judged domain scores.

    Args:
        domain_scores: Mapping of domain name to a {score, reasoning} pair
            (or a DomainScore). Missing domains score 0 and still carry
            their weight. A non-mapping input is treated as empty.
        issues: Issues already found upstream, keyed by domain name. Used
            for domains whose score arrives here already coerced.

    Returns:
        CompositeResult with overall score, status and per-domain breakdown
    """
    entries: Mapping = domain_scores if isinstance(domain_scores, Mapping) else {}

    total = Decimal(0)
    domains: dict[str, DomainContribution] = {}

    for domain in Domain:
        weight = DOMAIN_WEIGHTS[domain.value]
        score, reasoning, issue = _read_domain(entries, domain)
        if issue is None and issues:
            issue = issues.get(domain.value)

        if issue is not None:
            logger.debug(f"Domain {domain.value} coerced to {score} ({issue.value})")

        weighted = Decimal(score) * Decimal(str(weight))
        total += weighted

        domains[domain.value] = DomainContribution(
            score=score,
            weight=weight,
            weighted_score=float(weighted),
            reasoning=reasoning,
            issue=issue,
        )

    overall = int(total.quantize(_ONE, rounding=ROUND_HALF_UP))
    overall = max(0, min(100, overall))

    return CompositeResult(
        overall_score=overall,
        readiness_status=classify_readiness(overall),
        domains=domains,
    )
