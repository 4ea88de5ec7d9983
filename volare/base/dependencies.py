from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from volare.ai import create_budget_engine, create_suggestion_engine
from volare.ai.interface import BudgetEngine, SuggestionEngine
from volare.base.db import async_session


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Engines are shared across requests; the suggestion engine keeps its
# consecutive-failure count between calls.
@lru_cache(maxsize=1)
def get_budget_engine() -> BudgetEngine:
    return create_budget_engine()


@lru_cache(maxsize=1)
def get_suggestion_engine() -> SuggestionEngine:
    return create_suggestion_engine()
