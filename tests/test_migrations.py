"""Checks that the SQL migrations define what the Supabase layer calls."""

import re
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

from grant_engine.core.usage_limits import SupabaseUsageStore

MIGRATION = Path(__file__).resolve().parent.parent / "migrations" / "0001_cre_scores_and_usage.sql"


def _sql() -> str:
    return MIGRATION.read_text()


def test_tables_used_by_code_are_created():
    sql = _sql()
    for table in (
        "applications",
        "cre_scores",
        "user_limits",
        "token_usage",
        "daily_usage",
        "llm_usage_log",
    ):
        assert f"CREATE TABLE IF NOT EXISTS {table} (" in sql


def test_increment_function_matches_rpc_arguments():
    client = MagicMock()
    SupabaseUsageStore(client).record_usage("u1", date(2026, 3, 2), "cre-score", 10, 0.0)
    rpc_name, rpc_args = client.rpc.call_args.args

    match = re.search(rf"CREATE OR REPLACE FUNCTION {rpc_name}\((.*?)\) RETURNS", _sql(), re.S)

    assert match is not None
    declared = re.findall(r"\b(p_\w+)\b", match.group(1))
    assert sorted(declared) == sorted(rpc_args)


def test_daily_usage_upsert_increments_request_count():
    sql = _sql()

    assert "ON CONFLICT (user_id, date)" in sql
    assert "request_count = daily_usage.request_count + 1" in sql
