from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from volare.ai.interface import BudgetEngine, BudgetRequest
from volare.budget.errors import classify_error
from volare.budget.models import BudgetResult, HousingMode
from volare.corrections.store import get_relevant_corrections

logger = logging.getLogger(__name__)


async def fetch_budget(
    session: AsyncSession,
    engine: BudgetEngine,
    *,
    city: str,
    category_ids: Sequence[str],
    currency_code: str,
    language_code: str,
    housing_mode: HousingMode = HousingMode.SHARED,
) -> BudgetResult:
    """Load past corrections for this city and language, then fetch a budget."""
    city = city.strip()

    try:
        corrections = await get_relevant_corrections(session, city, language_code)
    except Exception as exc:
        logger.exception("Could not load corrections for %s", city)
        raise classify_error(exc) from exc

    if corrections:
        logger.info("Applying %d past corrections for %s", len(corrections), city)

    request = BudgetRequest(
        city=city,
        category_ids=tuple(category_ids),
        currency_code=currency_code,
        language_code=language_code,
        housing_mode=housing_mode,
        corrections=tuple(corrections),
    )
    return await engine.fetch_budget(request)
