from collections.abc import AsyncGenerator
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from volare.base.models import BaseDbModel


@pytest.fixture
def lisbon_payload() -> dict[str, Any]:
    return {
        "city": "Lisbon",
        "currency": "USD",
        "currencySymbol": "$",
        "totalMonthly": 950,
        "summary": "A frugal single person can get by in Lisbon.",
        "items": [
            {
                "category": "housing",
                "amount": 600,
                "description": "Room in a shared flat in Arroios",
                "explanation": "Cheapest listings on Idealista",
            },
            {
                "category": "groceries",
                "amount": 350,
                "description": "Pingo Doce and Lidl staples",
            },
        ],
        "coordinates": {"lat": 38.7223, "lng": -9.1393},
        "sourceSnippets": {"Idealista": "Rooms from 550 EUR in Arroios"},
    }


@pytest.fixture
def grounding_metadata() -> dict[str, Any]:
    return {
        "grounding_metadata": {
            "grounding_chunks": [
                {"web": {"title": "Idealista", "uri": "https://idealista.pt/x"}},
                {"web": {"title": "Numbeo", "uri": "https://numbeo.com/lisbon"}},
            ]
        }
    }


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    # Import all models so metadata knows about them
    import volare.corrections.models  # noqa: F401

    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(BaseDbModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(BaseDbModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()
