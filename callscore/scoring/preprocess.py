from __future__ import annotations

TRUNCATION_MARKER = "\n\n[... transcript truncated: middle of call omitted ...]\n\n"


def truncate(text: str, max_len: int) -> str:
    """Bound transcript size while keeping both the opening and the closing.

    Returns `text` unchanged when it already fits. Otherwise keeps the head and
    tail of the call around `TRUNCATION_MARKER`, sized so the result is exactly
    `max_len` characters long. Because the output fits `max_len`, applying the
    function again with the same limit returns it unchanged.
    """
    if max_len < 0:
        raise ValueError("max_len must be >= 0")
    if len(text) <= max_len:
        return text

    budget = max_len - len(TRUNCATION_MARKER)
    if budget < 2:
        # No room for the marker plus both ends.
        return text[:max_len]

    head = budget // 2
    tail = budget - head
    return text[:head] + TRUNCATION_MARKER + text[-tail:]
