from __future__ import annotations

import pytest

from callscore.scoring.preprocess import TRUNCATION_MARKER, truncate


def test_truncate_returns_short_text_unchanged() -> None:
    text = "AGENT: hello\nUSER: hi"
    assert truncate(text, 100) is text
    assert truncate(text, len(text)) == text


def test_truncate_keeps_opening_and_closing_of_long_call() -> None:
    opening = "O" * 25_000
    closing = "C" * 25_000
    result = truncate(opening + closing, 30_000)

    assert len(result) == 30_000
    assert TRUNCATION_MARKER in result
    head, tail = result.split(TRUNCATION_MARKER)
    assert set(head) == {"O"}
    assert set(tail) == {"C"}
    assert len(head) >= 14_900
    assert len(tail) >= 14_900


@pytest.mark.parametrize("max_len", [0, 1, 40, 80, 500, 1_000])
def test_truncate_is_idempotent(max_len: int) -> None:
    text = "".join(chr(97 + i % 26) for i in range(2_000))
    once = truncate(text, max_len)
    assert truncate(once, max_len) == once
    assert len(once) <= max_len


def test_truncate_hard_cuts_when_marker_does_not_fit() -> None:
    text = "abcdefghijklmnopqrstuvwxyz" * 10
    assert truncate(text, 5) == "abcde"


def test_truncate_rejects_negative_limit() -> None:
    with pytest.raises(ValueError):
        truncate("anything", -1)
