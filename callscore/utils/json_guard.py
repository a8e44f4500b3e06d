from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from callscore.llm.base import BaseLLM

M = TypeVar("M", bound=BaseModel)


class JSONValidationError(ValueError):
    """Raised when model output cannot be validated against the requested schema."""

    pass


def extract_first_json_object(text: str) -> str:  # noqa: C901
    """Extract first balanced JSON object while respecting string escapes."""
    start = text.find("{")
    if start == -1:
        return text

    depth = 0
    in_string = False
    escape = False
    for idx, char in enumerate(text[start:], start=start):
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return text


def unwrap_json_text(candidate: str) -> str:
    """Remove markdown wrappers and isolate JSON candidate text."""
    text = candidate.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return extract_first_json_object(text).strip()


def validate_json(candidate: str, required_keys: list[str]) -> dict[str, Any]:
    """Parse candidate JSON and enforce required key presence."""
    try:
        data = json.loads(unwrap_json_text(candidate))
    except json.JSONDecodeError as exc:
        raise JSONValidationError(f"Response is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise JSONValidationError("Response is not a JSON object")
    missing = [k for k in required_keys if k not in data]
    if missing:
        raise JSONValidationError(f"Missing keys: {missing}")
    return data


def validate_model(candidate: str, schema: type[M], required_keys: list[str]) -> M:
    data = validate_json(candidate, required_keys)
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise JSONValidationError(
            f"Response does not match {schema.__name__}: {exc.error_count()} error(s)"
        ) from exc


async def parse_model_with_repair(
    llm: BaseLLM,
    raw_text: str,
    schema: type[M],
    required_keys: list[str],
    max_repair_retries: int = 1,
) -> M:
    """Parse model output into a validated schema instance with bounded self-repair.

    Typical failure modes handled here:
    - markdown code fences around JSON
    - extra text before/after JSON object
    - missing required keys or wrongly typed values

    Adapter errors raised during a repair call propagate unchanged so the
    caller can classify them.
    """
    candidate = raw_text
    try:
        return validate_model(candidate, schema, required_keys)
    except JSONValidationError as exc:
        last_error = exc

    for _ in range(max_repair_retries):
        repair_system_prompt = "You fix invalid JSON. Return JSON only."
        repair_user_prompt = (
            "Repair this output into valid JSON with these keys: "
            f"{required_keys}.\n"
            "Do not add markdown.\n\n"
            f"Input:\n{candidate}"
        )
        candidate = await llm.generate(repair_system_prompt, repair_user_prompt)
        try:
            return validate_model(candidate, schema, required_keys)
        except JSONValidationError as exc:
            last_error = exc

    raise JSONValidationError(
        f"Could not parse valid {schema.__name__} after {max_repair_retries} repair attempt(s): "
        f"{last_error}"
    )
