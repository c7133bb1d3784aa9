"""Domain judge for composite readiness scoring.

A single Sonnet call scores a grant application on the six readiness
domains (0-100 each, with reasoning) and lists strengths, weaknesses and
revision priorities. The response is decoded strictly: the top level must
be a JSON object, every domain score is range-checked and coerced, and
missing or malformed domains are reported rather than trusted.
"""

import json
import time
from typing import Any
from uuid import UUID

from grant_engine.core.config import get_settings
from grant_engine.core.cre.score import coerce_score
from grant_engine.core.cre.types import Domain, DomainScore, ScoreIssue
from grant_engine.core.llm import parse_llm_json_dict
from grant_engine.core.llm_usage import log_llm_usage
from grant_engine.core.logging import get_logger
from grant_engine.core.mechanisms import Mechanism, reviewer_persona
from grant_engine.core.schemas_cre import (
    DomainJudgement,
    JudgeResult,
    JudgeUsage,
    MechanisticClassification,
)

logger = get_logger(__name__)


class JudgeUnavailableError(RuntimeError):
    """The judging model could not be reached or returned an API error."""


class JudgeDecodeError(ValueError):
    """The judge response was not a decodable JSON object."""

    def __init__(self, message: str, usage: JudgeUsage | None = None):
        super().__init__(message)
        self.usage = usage


JUDGE_SYSTEM = """You are {persona}. You score grant applications on six domains, each from 0 to 100.

## Domains
- hypothesisClarity: Is there a single, explicit, testable central hypothesis?
- novelty: Does the work challenge or shift current paradigms, or is it incremental?
- mechanisticDepth: Does it go beyond description and association to mechanism or causal intervention? Classify it as descriptive, associative, mechanistic or causal_intervention.
- statisticalRigor: Are power, sample size, controls, randomization and analysis plans adequate?
- feasibility: Do preliminary data, team, timeline and resources support success?
- fundingAlignment: Does it fit the mission and review criteria of the named mechanism?

## Rules
- Scores are integers from 0 to 100. Be calibrated: most fundable applications score 70-85.
- Reasoning is 1-3 sentences citing the application text.
- Return valid JSON only. No markdown fences."""

JUDGE_USER = """Score this {mechanism_name} ({agency}) application on each domain (0-100):

TITLE: {title}
HYPOTHESIS: {hypothesis}
SPECIFIC AIMS: {specific_aims}
RESEARCH STRATEGY: {research_strategy}

Return ONLY this JSON object:
{{
  "hypothesisClarity": {{ "score": 0-100, "reasoning": "explanation" }},
  "novelty": {{ "score": 0-100, "reasoning": "explanation" }},
  "mechanisticDepth": {{ "score": 0-100, "reasoning": "explanation", "classification": "descriptive|associative|mechanistic|causal_intervention" }},
  "statisticalRigor": {{ "score": 0-100, "reasoning": "explanation" }},
  "feasibility": {{ "score": 0-100, "reasoning": "explanation" }},
  "fundingAlignment": {{ "score": 0-100, "reasoning": "explanation" }},
  "keyStrengths": ["list"],
  "criticalWeaknesses": ["list"],
  "revisionPriorities": ["ordered list of what to fix first"]
}}"""


# =============================================================================
# Decoding
# =============================================================================


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _classification(entry: Any) -> MechanisticClassification | None:
    if not isinstance(entry, dict):
        return None
    raw = entry.get("classification")
    if not isinstance(raw, str):
        return None
    try:
        return MechanisticClassification(raw.strip().lower())
    except ValueError:
        return None


def decode_judgement(payload: dict[str, Any]) -> DomainJudgement:
    """
    Decode a parsed judge payload into typed domain scores.

    Domains that are absent (or lack a score) are listed as missing and left
    out of domain_scores. Domains with a non-object entry or a non-numeric,
    NaN or out-of-range score are coerced and listed as invalid.
    """
    domain_scores: dict[str, DomainScore] = {}
    missing: list[str] = []
    invalid: list[str] = []
    issues: dict[str, ScoreIssue] = {}

    for domain in Domain:
        entry = payload.get(domain.value)

        if entry is None or (isinstance(entry, dict) and "score" not in entry):
            missing.append(domain.value)
            continue

        if isinstance(entry, dict):
            score, issue = coerce_score(entry["score"])
            reasoning = entry.get("reasoning")
        else:
            score, issue = 0, ScoreIssue.NON_NUMERIC
            reasoning = None

        if issue is not None:
            invalid.append(domain.value)
            issues[domain.value] = issue

        domain_scores[domain.value] = DomainScore(
            domain=domain,
            score=score,
            reasoning=reasoning.strip() if isinstance(reasoning, str) else "",
        )

    return DomainJudgement(
        domain_scores=domain_scores,
        missing_domains=missing,
        invalid_domains=invalid,
        domain_issues=issues,
        mechanistic_classification=_classification(payload.get(Domain.MECHANISTIC_DEPTH.value)),
        key_strengths=_string_list(payload.get("keyStrengths")),
        critical_weaknesses=_string_list(payload.get("criticalWeaknesses")),
        revision_priorities=_string_list(payload.get("revisionPriorities")),
    )


def decode_judge_response(raw_text: str) -> DomainJudgement:
    """
    Decode raw judge output.

    Raises:
        JudgeDecodeError: If the output is not a JSON object
    """
    try:
        payload = parse_llm_json_dict(raw_text)
    except ValueError as e:
        raise JudgeDecodeError(f"Judge response is not a JSON object: {e}") from e
    return decode_judgement(payload)


# =============================================================================
# Judge call
# =============================================================================


def build_judge_prompt(
    mechanism: Mechanism,
    title: str,
    specific_aims: str,
    research_strategy: str,
    hypothesis: str | None = None,
) -> tuple[str, str]:
    """Build (system, user) prompts for the domain judge."""
    system = JUDGE_SYSTEM.format(persona=reviewer_persona(mechanism.agency))
    user = JUDGE_USER.format(
        mechanism_name=mechanism.name,
        agency=mechanism.agency.value,
        title=title.strip() or "Not provided",
        hypothesis=(hypothesis or "").strip() or "Not explicitly stated",
        specific_aims=specific_aims.strip() or "Not provided",
        research_strategy=research_strategy.strip() or "Not provided",
    )
    return system, user


async def score_grant_domains(
    mechanism: Mechanism,
    title: str,
    specific_aims: str,
    research_strategy: str,
    hypothesis: str | None = None,
    user_id: UUID | str | None = None,
    application_id: UUID | str | None = None,
) -> JudgeResult:
    """
    Ask the judging model to score an application on the six domains.

    Returns:
        JudgeResult with the decoded judgement and token usage

    Raises:
        JudgeUnavailableError: If the Anthropic API call fails
        JudgeDecodeError: If the response is not a JSON object (carries usage)
    """
    from anthropic import APIError, AsyncAnthropic

    settings = get_settings()
    client = AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
    system, user_message = build_judge_prompt(
        mechanism, title, specific_aims, research_strategy, hypothesis
    )

    start = time.time()
    try:
        response = await client.messages.create(
            model=settings.CRE_MODEL,
            max_tokens=settings.CRE_MAX_TOKENS,
            temperature=settings.CRE_TEMPERATURE,
            system=[
                {
                    "type": "text",
                    "text": system,
                    "cache_control": {"type": "ephemeral"},
                }
            ],
            messages=[{"role": "user", "content": user_message}],
        )
    except APIError as e:
        logger.error(f"Domain judge call failed for mechanism {mechanism.id}: {e}")
        raise JudgeUnavailableError("Domain judge unavailable") from e
    duration_ms = int((time.time() - start) * 1000)

    usage = JudgeUsage(
        model=settings.CRE_MODEL,
        tokens_input=response.usage.input_tokens,
        tokens_output=response.usage.output_tokens,
        duration_ms=duration_ms,
    )
    log_llm_usage(
        workflow="cre_score",
        model=settings.CRE_MODEL,
        provider="anthropic",
        tokens_input=usage.tokens_input,
        tokens_output=usage.tokens_output,
        duration_ms=duration_ms,
        user_id=user_id,
        application_id=application_id,
        chain="score_grant_domains",
        tokens_cache_read=getattr(response.usage, "cache_read_input_tokens", 0) or 0,
    )

    text = ""
    for block in response.content or []:
        if block.type == "text":
            text = block.text
            break
    try:
        judgement = decode_judge_response(text)
    except JudgeDecodeError as e:
        logger.warning(f"Undecodable judge response: {json.dumps(text[:200])}")
        raise JudgeDecodeError(str(e), usage=usage) from e

    logger.info(
        f"Domain judge scored {len(judgement.domain_scores)}/{len(Domain)} domains "
        f"for {mechanism.id} ({duration_ms}ms)"
    )
    if not judgement.is_complete:
        logger.warning(
            f"Incomplete judgement: missing={judgement.missing_domains} "
            f"invalid={judgement.invalid_domains}"
        )

    return JudgeResult(judgement=judgement, usage=usage)
