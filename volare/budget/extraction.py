from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

from volare.budget.errors import ErrorKind, ServiceError

_JSON_FENCE_PATTERN = re.compile(r"```json(.*?)(?:```|$)", re.DOTALL)


def _fenced_block(text: str) -> str | None:
    match = _JSON_FENCE_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def _brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def _whole_text(text: str) -> str | None:
    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped
    return None


# Tried in order; the first candidate that parses to a JSON object wins.
_STRATEGIES: tuple[Callable[[str], str | None], ...] = (
    _fenced_block,
    _brace_span,
    _whole_text,
)


def extract_json_payload(text: str) -> dict[str, Any]:
    """
    Pull the JSON object out of a free-text model answer.

    The model may wrap its JSON in a ```json fence, surround it with prose, or
    return it bare. Raises ServiceError with kind `empty` when the text holds
    no `{`...`}` span at all, and kind `parsing` when none of the candidates
    decoded to an object.
    """
    if _brace_span(text) is None:
        raise ServiceError("The model returned no JSON payload", ErrorKind.EMPTY)

    last_error: Exception | None = None

    for strategy in _STRATEGIES:
        candidate = strategy(text)
        if not candidate:
            continue

        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue

        if isinstance(parsed, dict):
            return parsed
        last_error = ValueError(
            f"Expected a JSON object, got {type(parsed).__name__}"
        )

    raise ServiceError(
        f"Could not parse the model response: {last_error}",
        ErrorKind.PARSING,
        last_error,
    ) from last_error
