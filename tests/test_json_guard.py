from __future__ import annotations

import asyncio

import pytest

from callscore.scoring.models import DegradedSummary
from callscore.utils.json_guard import (
    JSONValidationError,
    parse_model_with_repair,
    unwrap_json_text,
)

KEYS = ["summary", "overallScore"]


def test_unwrap_strips_fences_and_chatter() -> None:
    raw = 'Here you go:\n```json\n{"summary": "a {brace} \\"quoted\\"", "overallScore": 2}\n```'
    assert unwrap_json_text(raw) == '{"summary": "a {brace} \\"quoted\\"", "overallScore": 2}'


def test_parse_returns_model_without_repair(make_llm) -> None:
    llm = make_llm(["unused"])
    result = asyncio.run(
        parse_model_with_repair(llm, '{"summary": "fine", "overallScore": 3}', DegradedSummary, KEYS)
    )
    assert result.summary == "fine"
    assert llm.calls == []


def test_parse_repairs_missing_keys(make_llm) -> None:
    llm = make_llm([{"summary": "fixed", "overallScore": 4}])
    result = asyncio.run(
        parse_model_with_repair(llm, '{"summary": "half"}', DegradedSummary, KEYS, max_repair_retries=1)
    )
    assert result.overall_score == 4.0
    assert len(llm.calls) == 1
    assert "overallScore" in llm.calls[0][1]


def test_parse_gives_up_after_repairs(make_llm) -> None:
    llm = make_llm(["still not json"])
    with pytest.raises(JSONValidationError, match="DegradedSummary"):
        asyncio.run(parse_model_with_repair(llm, "", DegradedSummary, KEYS, max_repair_retries=2))
    assert len(llm.calls) == 2


def test_parse_rejects_wrong_types(make_llm) -> None:
    llm = make_llm(["unused"])
    with pytest.raises(JSONValidationError):
        asyncio.run(
            parse_model_with_repair(
                llm,
                '{"summary": ["not", "a", "string"], "overallScore": 1}',
                DegradedSummary,
                KEYS,
                max_repair_retries=0,
            )
        )
