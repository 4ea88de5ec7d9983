from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

from volare.ai.interface import (
    BudgetEngine,
    BudgetRequest,
    ConnectivityProbe,
    SuggestionEngine,
    SuggestionRequest,
)
from volare.ai.models import _CitySuggestionsSchema
from volare.ai.prompts import build_budget_prompt, build_suggestion_prompt
from volare.base.maintenance import RequestTrace
from volare.budget.assembly import assemble_result
from volare.budget.errors import ServiceError, classify_error
from volare.budget.extraction import extract_json_payload
from volare.budget.models import BudgetResult
from volare.corrections.store import format_corrections_for_prompt
from volare.reference import find_currency, find_language

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"


class LangChainSuggestionEngine(SuggestionEngine):
    """City autocomplete via schema-constrained Gemini output. Never raises."""

    _MAX_SUGGESTIONS = 5

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm
        self._consecutive_failures = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    async def suggest(self, request: SuggestionRequest) -> list[str]:
        if not request.text.strip() and not request.filters.is_set():
            return []

        location = request.location
        prompt = build_suggestion_prompt(
            text=request.text,
            language=find_language(request.language_code),
            filters=request.filters,
            lat=location.lat if location else None,
            lng=location.lng if location else None,
        )

        try:
            structured_llm = self._llm.with_structured_output(_CitySuggestionsSchema)
            response = await structured_llm.ainvoke([("user", prompt)])
            # No structured call in the answer comes back as None.
            if not isinstance(response, _CitySuggestionsSchema):
                raise ValueError(
                    f"Expected city suggestions, got {type(response).__name__}"
                )
            suggestions = _clean_suggestions(response.cities, self._MAX_SUGGESTIONS)
        except Exception:
            self._consecutive_failures += 1
            logger.exception(
                "City suggestions failed for %r (%d in a row)",
                request.text,
                self._consecutive_failures,
            )
            return []

        self._consecutive_failures = 0
        return suggestions


class LangChainBudgetEngine(BudgetEngine):
    """Grounded cost-of-living estimates from Gemini with Google Search."""

    _SEARCH_TOOL: dict[str, Any] = {"google_search": {}}

    def __init__(
        self,
        llm: BaseChatModel,
        connectivity: ConnectivityProbe,
        model_name: str = DEFAULT_MODEL,
    ) -> None:
        self._llm = llm
        self._connectivity = connectivity
        self._model_name = model_name

    async def fetch_budget(self, request: BudgetRequest) -> BudgetResult:
        """Fetch a budget. Every failure surfaces as a classified ServiceError."""
        try:
            return await self._fetch(request)
        except ServiceError as exc:
            logger.warning(
                "Budget for %s unusable (%s): %s",
                request.city,
                exc.kind.value,
                exc.message,
            )
            raise
        except Exception as exc:
            online = await self._connectivity.is_online()
            error = classify_error(exc, online=online)
            logger.exception(
                "Budget for %s failed (%s)", request.city, error.kind.value
            )
            raise error from exc

    async def _fetch(self, request: BudgetRequest) -> BudgetResult:
        currency = find_currency(request.currency_code)
        language = find_language(request.language_code)

        prompt = build_budget_prompt(
            city=request.city,
            category_ids=request.category_ids,
            housing_mode=request.housing_mode,
            currency=currency,
            language=language,
            corrections_addendum=format_corrections_for_prompt(request.corrections),
        )

        grounded_llm = self._llm.bind_tools([self._SEARCH_TOOL])

        start = time.monotonic()
        message = await grounded_llm.ainvoke([("user", prompt)])
        duration = time.monotonic() - start

        payload = extract_json_payload(_message_text(message))

        trace = RequestTrace(
            model_name=self._model_name,
            duration_seconds=duration,
            corrections_applied=len(request.corrections),
        )
        return assemble_result(
            payload,
            city=request.city,
            currency=currency,
            chunks=_grounding_chunks(message),
            trace=trace,
        )


def _clean_suggestions(cities: list[str], limit: int) -> list[str]:
    seen: set[str] = set()
    cleaned: list[str] = []
    for city in cities:
        name = city.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        cleaned.append(name)
    return cleaned[:limit]


def _message_text(message: BaseMessage) -> str:
    """Plain text of a chat message whose content may be a list of blocks."""
    content = message.content
    if isinstance(content, str):
        return content

    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


def _grounding_chunks(message: BaseMessage) -> list[Mapping[str, Any]]:
    """Search citations attached to a grounded Gemini answer."""
    metadata = message.response_metadata or {}
    grounding = (
        metadata.get("grounding_metadata") or metadata.get("groundingMetadata") or {}
    )
    if not isinstance(grounding, Mapping):
        return []

    chunks = grounding.get("grounding_chunks") or grounding.get("groundingChunks") or []
    return [chunk for chunk in chunks if isinstance(chunk, Mapping)]
