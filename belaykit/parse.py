"""Helpers for pulling structured JSON out of free-form model responses."""

from __future__ import annotations

import json
from typing import Any

from .errors import NoJSONError


def strip_code_fences(text: str) -> str:
    """Drop every markdown fence line (```, ```json, ...) and keep the rest."""
    kept = [line for line in text.split("\n") if not line.strip().startswith("```")]
    return "".join(f"{line}\n" for line in kept)


def _slice_between(text: str, opener: str, closer: str) -> str:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end == -1 or end <= start:
        raise NoJSONError()
    return text[start : end + 1]


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ValueError(f"parsing JSON: {exc}") from exc


def extract_json(text: str) -> dict[str, Any]:
    """
    Parse the JSON object spanning the first "{" to the last "}".

    Raises NoJSONError when no object delimiters are present and ValueError
    when the span is not valid JSON.
    """
    parsed = _loads(_slice_between(strip_code_fences(text), "{", "}"))
    if not isinstance(parsed, dict):
        raise ValueError("parsing JSON: expected an object")
    return parsed


def extract_json_array(text: str) -> list[Any]:
    """Like extract_json, for the span from the first "[" to the last "]"."""
    parsed = _loads(_slice_between(strip_code_fences(text), "[", "]"))
    if not isinstance(parsed, list):
        raise ValueError("parsing JSON: expected an array")
    return parsed
