from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable, Coroutine, Sequence
from typing import Any, Generic, TypeVar

from volare.ai.interface import (
    BudgetRequest,
    Location,
    SuggestionEngine,
    SuggestionRequest,
)
from volare.budget.errors import ServiceError, classify_error
from volare.budget.models import BudgetResult, HousingMode, SearchFilters
from volare.reference import BUDGET_CATEGORIES

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEBOUNCE_SECONDS = 0.3

BudgetFetcher = Callable[[BudgetRequest], Coroutine[Any, Any, BudgetResult]]


class RequestSuperseded(Exception):
    """The request was cancelled because a newer one replaced it."""


class LatestOnly(Generic[T]):
    """Keeps at most one request in flight for one logical operation.

    Starting a request cancels the previous one; the caller awaiting the
    cancelled request gets RequestSuperseded instead of a result.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[T] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        self.cancel()
        task = asyncio.create_task(coro)
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._task is not task:
                raise RequestSuperseded() from None
            raise
        finally:
            if self._task is task and task.done():
                self._task = None


class Overlay(enum.Enum):
    NONE = "none"
    SUGGESTIONS = "suggestions"
    LANGUAGE_MENU = "language_menu"
    SHARE_MENU = "share_menu"
    FEEDBACK = "feedback"


class ViewStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class SearchSession:
    """Headless state of one search screen.

    At most one overlay is open at a time. Suggestion lookups are debounced,
    and both suggestion and budget requests are superseded by newer ones: a
    stale answer never overwrites state set by a later request.
    """

    def __init__(
        self,
        fetcher: BudgetFetcher,
        suggestion_engine: SuggestionEngine,
        *,
        language_code: str = "es",
        currency_code: str = "USD",
        category_ids: Sequence[str] | None = None,
        housing_mode: HousingMode = HousingMode.SHARED,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._suggestion_engine = suggestion_engine
        self._debounce_seconds = debounce_seconds

        self.language_code = language_code
        self.currency_code = currency_code
        self.category_ids: tuple[str, ...] = tuple(
            category_ids or (c.id for c in BUDGET_CATEGORIES)
        )
        self.housing_mode = housing_mode
        self.filters = SearchFilters()
        self.location: Location | None = None

        self.query = ""
        self.suggestions: list[str] = []
        self.overlay = Overlay.NONE
        self.status = ViewStatus.IDLE
        self.result: BudgetResult | None = None
        self.error: ServiceError | None = None

        self._last_request: BudgetRequest | None = None
        self._suggest_gate: LatestOnly[list[str]] = LatestOnly()
        self._budget_gate: LatestOnly[BudgetResult] = LatestOnly()

    # ── Overlays ──

    def open_overlay(self, overlay: Overlay) -> None:
        self.overlay = overlay

    def toggle_overlay(self, overlay: Overlay) -> None:
        self.overlay = Overlay.NONE if self.overlay is overlay else overlay

    def outside_interaction(self) -> None:
        self.overlay = Overlay.NONE

    def set_language(self, language_code: str) -> None:
        self.language_code = language_code
        self.overlay = Overlay.NONE

    # ── Suggestions ──

    async def update_query(self, text: str) -> list[str] | None:
        """Record typed input and refresh suggestions after the quiet period.

        Returns None when a later keystroke superseded this lookup.
        """
        self.query = text

        if not text.strip() and not self.filters.is_set():
            self._suggest_gate.cancel()
            self._apply_suggestions([])
            return []

        try:
            results = await self._suggest_gate.run(self._debounced_suggest(text))
        except RequestSuperseded:
            return None

        self._apply_suggestions(results)
        return results

    async def _debounced_suggest(self, text: str) -> list[str]:
        await asyncio.sleep(self._debounce_seconds)
        request = SuggestionRequest(
            text=text,
            language_code=self.language_code,
            filters=self.filters,
            location=self.location,
        )
        return list(await self._suggestion_engine.suggest(request))

    def _apply_suggestions(self, results: list[str]) -> None:
        self.suggestions = results
        if results:
            self.overlay = Overlay.SUGGESTIONS
        elif self.overlay is Overlay.SUGGESTIONS:
            self.overlay = Overlay.NONE

    # ── Budget ──

    async def search(self, city: str | None = None) -> BudgetResult | None:
        """Start a budget search, superseding any search still in flight."""
        final_city = (city if city is not None else self.query).strip()
        if not final_city:
            return None

        self.query = final_city
        self.overlay = Overlay.NONE
        self._suggest_gate.cancel()

        request = BudgetRequest(
            city=final_city,
            category_ids=self.category_ids,
            currency_code=self.currency_code,
            language_code=self.language_code,
            housing_mode=self.housing_mode,
        )
        return await self._run_budget(request)

    async def select_suggestion(self, suggestion: str) -> BudgetResult | None:
        return await self.search(suggestion)

    async def retry(self) -> BudgetResult | None:
        """Re-issue the last budget request unchanged."""
        if self._last_request is None:
            return None
        return await self._run_budget(self._last_request)

    def cancel_pending(self) -> None:
        """Drop in-flight requests, e.g. when the user navigates away."""
        self._suggest_gate.cancel()
        if self._budget_gate.pending:
            self._budget_gate.cancel()
            self.status = ViewStatus.READY if self.result else ViewStatus.IDLE

    async def _run_budget(self, request: BudgetRequest) -> BudgetResult | None:
        self._last_request = request
        self.status = ViewStatus.LOADING
        self.error = None

        try:
            result = await self._budget_gate.run(self._fetcher(request))
        except RequestSuperseded:
            logger.debug("Budget request for %s superseded", request.city)
            return None
        except Exception as exc:
            self.error = classify_error(exc)
            self.status = ViewStatus.FAILED
            return None

        self.result = result
        self.status = ViewStatus.READY
        return result
