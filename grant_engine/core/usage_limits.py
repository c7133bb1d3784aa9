"""Per-user daily LLM usage limits.

Counters live in an externally-owned store that is handed to the request
handler (see get_usage_store in the API layer), so every server instance
sees the same counts. InMemoryUsageStore is per-instance and meant for
tests and single-process development.
"""

import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from fastapi import HTTPException
from supabase import Client

from grant_engine.core.llm_usage import estimate_cost
from grant_engine.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TierLimits:
    """Daily quota for a subscription tier."""

    daily_tokens: int
    daily_requests: int


TIER_LIMITS: dict[str, TierLimits] = {
    "free": TierLimits(daily_tokens=50_000, daily_requests=100),
    "pro": TierLimits(daily_tokens=500_000, daily_requests=1_000),
    "enterprise": TierLimits(daily_tokens=5_000_000, daily_requests=10_000),
}

DEFAULT_TIER = "free"


@dataclass
class DailyUsage:
    """Aggregated usage for one user on one day."""

    tokens: int = 0
    requests: int = 0
    cost_usd: float = 0.0


@dataclass
class UsageCheck:
    """Outcome of a usage-limit check."""

    allowed: bool
    reason: str | None = None
    remaining_tokens: int = 0
    remaining_requests: int = 0


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token)."""
    return math.ceil(len(text) / 4)


def _today() -> date:
    return datetime.now(UTC).date()


def resolve_tier(tier: str | None) -> str:
    """Map a stored tier name to a known tier, defaulting to free."""
    return tier if tier in TIER_LIMITS else DEFAULT_TIER


# =============================================================================
# Stores
# =============================================================================


class UsageStore(ABC):
    """Backing store for tiers and daily usage counters."""

    @abstractmethod
    def get_tier(self, user_id: str) -> str | None:
        """Return the user's tier name, or None if unset."""

    @abstractmethod
    def get_daily_usage(self, user_id: str, day: date) -> DailyUsage:
        """Return aggregated usage for the user on the given day."""

    @abstractmethod
    def record_usage(
        self, user_id: str, day: date, endpoint: str, tokens: int, cost_usd: float
    ) -> None:
        """Append one usage record and add it to the daily aggregate."""


class InMemoryUsageStore(UsageStore):
    """Process-local usage store."""

    def __init__(self, tiers: dict[str, str] | None = None):
        self._tiers: dict[str, str] = dict(tiers or {})
        self._daily: dict[tuple[str, date], DailyUsage] = {}
        self.records: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def set_tier(self, user_id: str, tier: str) -> None:
        self._tiers[user_id] = tier

    def get_tier(self, user_id: str) -> str | None:
        return self._tiers.get(user_id)

    def get_daily_usage(self, user_id: str, day: date) -> DailyUsage:
        with self._lock:
            usage = self._daily.get((user_id, day))
            return DailyUsage(**vars(usage)) if usage else DailyUsage()

    def record_usage(
        self, user_id: str, day: date, endpoint: str, tokens: int, cost_usd: float
    ) -> None:
        with self._lock:
            self.records.append(
                {"user_id": user_id, "endpoint": endpoint, "tokens_used": tokens, "cost_usd": cost_usd}
            )
            usage = self._daily.setdefault((user_id, day), DailyUsage())
            usage.tokens += tokens
            usage.requests += 1
            usage.cost_usd += cost_usd


class SupabaseUsageStore(UsageStore):
    """
    Usage store backed by Supabase tables.

    Tables: user_limits (tier per user), token_usage (one row per call) and
    daily_usage (per user per day aggregate, incremented atomically by the
    increment_daily_usage database function).
    """

    def __init__(self, client: Client):
        self.client = client

    def get_tier(self, user_id: str) -> str | None:
        response = (
            self.client.table("user_limits")
            .select("tier")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return response.data[0].get("tier") if response.data else None

    def get_daily_usage(self, user_id: str, day: date) -> DailyUsage:
        response = (
            self.client.table("daily_usage")
            .select("total_tokens, request_count, total_cost_usd")
            .eq("user_id", user_id)
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return DailyUsage()
        row = response.data[0]
        return DailyUsage(
            tokens=int(row.get("total_tokens") or 0),
            requests=int(row.get("request_count") or 0),
            cost_usd=float(row.get("total_cost_usd") or 0),
        )

    def record_usage(
        self, user_id: str, day: date, endpoint: str, tokens: int, cost_usd: float
    ) -> None:
        self.client.table("token_usage").insert(
            {
                "user_id": user_id,
                "endpoint": endpoint,
                "tokens_used": tokens,
                "cost_usd": cost_usd,
            }
        ).execute()
        self.client.rpc(
            "increment_daily_usage",
            {
                "p_user_id": user_id,
                "p_date": day.isoformat(),
                "p_tokens": tokens,
                "p_cost_usd": cost_usd,
            },
        ).execute()


# =============================================================================
# Limit checks and tracking
# =============================================================================


def check_usage_limit(
    store: UsageStore,
    user_id: str,
    day: date | None = None,
    estimated_tokens: int = 0,
) -> UsageCheck:
    """
    Check whether the user may make another LLM request today.

    Request count is checked before token count.

    Args:
        store: Usage store
        user_id: User identifier
        day: Day to check (defaults to today, UTC)
        estimated_tokens: Tokens the request is expected to use (see estimate_tokens)

    Returns:
        UsageCheck with the decision and remaining quota
    """
    day = day or _today()
    limits = TIER_LIMITS[resolve_tier(store.get_tier(user_id))]
    usage = store.get_daily_usage(user_id, day)

    if usage.requests >= limits.daily_requests:
        return UsageCheck(allowed=False, reason="Daily request limit reached. Upgrade for more.")
    if usage.tokens >= limits.daily_tokens:
        return UsageCheck(allowed=False, reason="Daily token limit reached. Upgrade for more.")
    if estimated_tokens > limits.daily_tokens - usage.tokens:
        return UsageCheck(
            allowed=False,
            reason="Not enough daily tokens remaining for this request. Upgrade for more.",
        )

    return UsageCheck(
        allowed=True,
        remaining_tokens=limits.daily_tokens - usage.tokens,
        remaining_requests=limits.daily_requests - usage.requests,
    )


def enforce_usage_limit(
    store: UsageStore, user_id: str, estimated_tokens: int = 0
) -> UsageCheck:
    """
    Check the usage limit and reject the request if it is exhausted.

    Raises:
        HTTPException: 429 if the daily limit is reached
    """
    result = check_usage_limit(store, user_id, estimated_tokens=estimated_tokens)
    if not result.allowed:
        logger.warning(f"Usage limit exceeded for user {user_id}: {result.reason}")
        raise HTTPException(status_code=429, detail=result.reason)
    return result


def track_usage(
    store: UsageStore,
    user_id: str,
    endpoint: str,
    tokens_input: int,
    tokens_output: int,
    model: str,
) -> None:
    """Record token usage and cost for a user. Never raises."""
    try:
        cost = estimate_cost(model, tokens_input, tokens_output)
        store.record_usage(user_id, _today(), endpoint, tokens_input + tokens_output, cost)
    except Exception as e:
        logger.warning(f"Failed to track usage for user {user_id}: {e}")


def get_usage_stats(store: UsageStore, user_id: str) -> dict[str, Any]:
    """
    Get today's usage and limits for a user.

    Returns:
        Dictionary with today's totals, tier and tier limits
    """
    tier = resolve_tier(store.get_tier(user_id))
    usage = store.get_daily_usage(user_id, _today())
    limits = TIER_LIMITS[tier]

    return {
        "today": {
            "tokens": usage.tokens,
            "requests": usage.requests,
            "cost": round(usage.cost_usd, 6),
        },
        "tier": tier,
        "limits": {
            "daily_tokens": limits.daily_tokens,
            "daily_requests": limits.daily_requests,
        },
    }
