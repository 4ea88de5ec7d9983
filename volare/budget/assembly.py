from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from volare.base.maintenance import RequestTrace
from volare.budget.errors import ErrorKind, ServiceError
from volare.budget.models import BudgetResult, Source
from volare.reference import CurrencyOption

logger = logging.getLogger(__name__)

MAX_SOURCES = 5
DEFAULT_SOURCE_TITLE = "Market Data"
DEFAULT_SOURCE_URI = "#"
DEFAULT_SNIPPET = "Verified market data"

# Relative gap between totalMonthly and the item sum that gets logged.
TOTAL_DRIFT_TOLERANCE = 0.01


def build_sources(
    chunks: Sequence[Mapping[str, Any]],
    snippets: Mapping[str, Any] | None = None,
) -> list[Source]:
    """Map grounding chunks to sources, at most MAX_SOURCES of them."""
    snippets = snippets or {}
    sources: list[Source] = []

    for chunk in chunks:
        if len(sources) == MAX_SOURCES:
            break
        web = chunk.get("web")
        if not isinstance(web, Mapping):
            continue

        title = str(web.get("title") or DEFAULT_SOURCE_TITLE)
        snippet = snippets.get(title)
        if not isinstance(snippet, str) or not snippet:
            snippet = DEFAULT_SNIPPET
        sources.append(
            Source(
                title=title,
                uri=str(web.get("uri") or DEFAULT_SOURCE_URI),
                snippet=snippet,
            )
        )

    return sources


def assemble_result(
    payload: Mapping[str, Any],
    *,
    city: str,
    currency: CurrencyOption,
    chunks: Sequence[Mapping[str, Any]] = (),
    trace: RequestTrace | None = None,
) -> BudgetResult:
    """
    Build a BudgetResult from the parsed model payload.

    The resolved currency overrides whatever the model echoed back, grounding
    chunks become the source list and missing saving tips become an empty list.
    """
    snippets = payload.get("sourceSnippets")
    if not isinstance(snippets, Mapping):
        snippets = None
    sources = build_sources(chunks, snippets)

    data = {
        **payload,
        "city": payload.get("city") or city,
        "currency": currency.code,
        "currencySymbol": currency.symbol,
        "savingTips": payload.get("savingTips") or [],
        "sources": [s.model_dump() for s in sources],
        "trace": trace.model_dump() if trace else None,
    }

    try:
        result = BudgetResult.model_validate(data)
    except ValidationError as exc:
        raise ServiceError(
            f"The model response has an unexpected shape: {exc.error_count()} error(s)",
            ErrorKind.PARSING,
            exc,
        ) from exc

    _warn_on_total_drift(result)
    return result


def _warn_on_total_drift(result: BudgetResult) -> None:
    items_total = result.items_total
    reference = max(abs(result.total_monthly), abs(items_total))
    if reference == 0:
        return
    if abs(result.total_monthly - items_total) / reference > TOTAL_DRIFT_TOLERANCE:
        logger.warning(
            "Total for %s (%s) differs from item sum (%s)",
            result.city,
            result.total_monthly,
            items_total,
        )
