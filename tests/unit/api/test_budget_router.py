from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from volare.ai.interface import BudgetEngine, BudgetRequest, SuggestionEngine
from volare.base.dependencies import (
    get_budget_engine,
    get_session,
    get_suggestion_engine,
)
from volare.budget.errors import ErrorKind, ServiceError
from volare.budget.models import BudgetResult, HousingMode, PopulationBucket
from volare.budget.router import DEGRADED_AFTER_FAILURES, router
from volare.corrections.models import CorrectionReason, UserCorrection
from volare.corrections.store import record_correction
from volare.reference import BUDGET_CATEGORIES


@pytest.fixture
def budget_result(lisbon_payload: dict[str, Any]) -> BudgetResult:
    return BudgetResult.model_validate(
        {**lisbon_payload, "currency": "EUR", "currencySymbol": "€"}
    )


@pytest.fixture
def budget_engine(budget_result: BudgetResult) -> MagicMock:
    engine = MagicMock(spec=BudgetEngine)
    engine.fetch_budget = AsyncMock(return_value=budget_result)
    return engine


@pytest.fixture
def suggestion_engine() -> MagicMock:
    engine = MagicMock(spec=SuggestionEngine)
    engine.suggest = AsyncMock(return_value=["Lisboa", "Lisieux"])
    engine.consecutive_failures = 0
    return engine


@pytest.fixture
def app(
    db_session: AsyncSession, budget_engine: MagicMock, suggestion_engine: MagicMock
) -> FastAPI:
    test_app = FastAPI()
    test_app.include_router(router)

    async def override_session() -> AsyncSession:  # type: ignore[misc]
        yield db_session  # type: ignore[misc]

    test_app.dependency_overrides[get_session] = override_session
    test_app.dependency_overrides[get_budget_engine] = lambda: budget_engine
    test_app.dependency_overrides[get_suggestion_engine] = lambda: suggestion_engine
    return test_app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _sent_request(engine: MagicMock) -> BudgetRequest:
    return engine.fetch_budget.call_args.args[0]


class TestCreateBudget:
    async def test_returns_camel_case_result(
        self, client: httpx.AsyncClient, budget_engine: MagicMock
    ) -> None:
        resp = await client.post(
            "/budget",
            json={"city": "  Lisbon ", "currency": "EUR", "language": "en"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["city"] == "Lisbon"
        assert data["currencySymbol"] == "€"
        assert data["totalMonthly"] == 950
        assert data["savingTips"] == []

        request = _sent_request(budget_engine)
        assert request.city == "Lisbon"
        assert request.currency_code == "EUR"
        assert request.language_code == "en"

    async def test_defaults(
        self, client: httpx.AsyncClient, budget_engine: MagicMock
    ) -> None:
        resp = await client.post("/budget", json={"city": "Lisbon"})

        assert resp.status_code == 200
        request = _sent_request(budget_engine)
        assert request.category_ids == tuple(c.id for c in BUDGET_CATEGORIES)
        assert request.currency_code == "USD"
        assert request.language_code == "es"
        assert request.housing_mode is HousingMode.SHARED

    async def test_passes_relevant_corrections(
        self,
        client: httpx.AsyncClient,
        budget_engine: MagicMock,
        db_session: AsyncSession,
    ) -> None:
        await record_correction(
            db_session,
            UserCorrection(
                city="lisbon",
                category="housing",
                language_code="en",
                reason=CorrectionReason.TOO_LOW,
            ),
        )
        await record_correction(
            db_session,
            UserCorrection(
                city="Porto",
                category="housing",
                language_code="en",
                reason=CorrectionReason.TOO_HIGH,
            ),
        )

        await client.post(
            "/budget",
            json={"city": "Lisbon", "language": "en", "housing": "house"},
        )

        request = _sent_request(budget_engine)
        assert [c.city for c in request.corrections] == ["lisbon"]
        assert request.housing_mode is HousingMode.HOUSE

    @pytest.mark.parametrize("city", ["", "   "])
    async def test_blank_city_rejected(
        self, client: httpx.AsyncClient, budget_engine: MagicMock, city: str
    ) -> None:
        resp = await client.post("/budget", json={"city": city})

        assert resp.status_code == 422
        budget_engine.fetch_budget.assert_not_awaited()

    async def test_unknown_category_rejected(self, client: httpx.AsyncClient) -> None:
        resp = await client.post(
            "/budget", json={"city": "Lisbon", "categories": ["housing", "yachts"]}
        )
        assert resp.status_code == 422

    async def test_empty_categories_rejected(self, client: httpx.AsyncClient) -> None:
        resp = await client.post("/budget", json={"city": "Lisbon", "categories": []})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        ("kind", "status"),
        [
            (ErrorKind.QUOTA, 429),
            (ErrorKind.SAFETY, 422),
            (ErrorKind.NOT_FOUND, 401),
            (ErrorKind.NETWORK, 503),
            (ErrorKind.PARSING, 502),
            (ErrorKind.EMPTY, 502),
            (ErrorKind.GENERIC, 500),
        ],
    )
    async def test_service_errors_map_to_status(
        self,
        client: httpx.AsyncClient,
        budget_engine: MagicMock,
        kind: ErrorKind,
        status: int,
    ) -> None:
        budget_engine.fetch_budget.side_effect = ServiceError("boom", kind)

        resp = await client.post("/budget", json={"city": "Lisbon"})

        assert resp.status_code == status
        detail = resp.json()["detail"]
        assert detail["kind"] == kind.value
        assert detail["message"] == "boom"
        assert detail["title"]
        assert detail["credentialAction"] is (kind is ErrorKind.NOT_FOUND)


class TestListSuggestions:
    async def test_returns_suggestions(
        self, client: httpx.AsyncClient, suggestion_engine: MagicMock
    ) -> None:
        resp = await client.get(
            "/suggestions",
            params={
                "q": "Lis",
                "lang": "en",
                "country": "Portugal",
                "population": "large",
                "lat": 38.7,
                "lng": -9.1,
            },
        )

        assert resp.status_code == 200
        assert resp.json() == {"suggestions": ["Lisboa", "Lisieux"], "degraded": False}

        request = suggestion_engine.suggest.call_args.args[0]
        assert request.text == "Lis"
        assert request.filters.country == "Portugal"
        assert request.filters.population is PopulationBucket.LARGE
        assert request.location is not None
        assert request.location.lat == 38.7

    async def test_location_needs_both_coordinates(
        self, client: httpx.AsyncClient, suggestion_engine: MagicMock
    ) -> None:
        await client.get("/suggestions", params={"q": "Lis", "lat": 38.7})

        assert suggestion_engine.suggest.call_args.args[0].location is None

    async def test_flags_degraded_after_repeated_failures(
        self, client: httpx.AsyncClient, suggestion_engine: MagicMock
    ) -> None:
        suggestion_engine.suggest.return_value = []
        suggestion_engine.consecutive_failures = DEGRADED_AFTER_FAILURES

        resp = await client.get("/suggestions", params={"q": "Lis"})

        assert resp.json() == {"suggestions": [], "degraded": True}


class TestReference:
    async def test_currencies(self, client: httpx.AsyncClient) -> None:
        resp = await client.get("/reference/currencies")

        data = resp.json()
        assert data[0] == {"code": "USD", "symbol": "$", "label": "US Dollar"}
        assert len(data) == 10

    async def test_languages_carry_direction(self, client: httpx.AsyncClient) -> None:
        resp = await client.get("/reference/languages")

        directions = {lang["code"]: lang["direction"] for lang in resp.json()}
        assert directions["ar"] == "rtl"
        assert directions["en"] == "ltr"

    async def test_categories(self, client: httpx.AsyncClient) -> None:
        resp = await client.get("/reference/categories")
        assert [c["id"] for c in resp.json()] == [c.id for c in BUDGET_CATEGORIES]
