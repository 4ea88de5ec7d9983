from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from volare.ai.interface import (
    BudgetEngine,
    Location,
    SuggestionEngine,
    SuggestionRequest,
)
from volare.base.dependencies import (
    get_budget_engine,
    get_session,
    get_suggestion_engine,
)
from volare.base.schemas import CamelModel
from volare.budget.errors import ERROR_GUIDANCE, ErrorKind, ServiceError
from volare.budget.models import (
    BudgetResult,
    HousingMode,
    PopulationBucket,
    SearchFilters,
)
from volare.budget.service import fetch_budget
from volare.reference import BUDGET_CATEGORIES, CURRENCIES, LANGUAGES

router = APIRouter()

# Consecutive suggestion failures before responses are flagged as degraded.
DEGRADED_AFTER_FAILURES = 3

_CATEGORY_IDS = frozenset(c.id for c in BUDGET_CATEGORIES)

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.QUOTA: 429,
    ErrorKind.SAFETY: 422,
    ErrorKind.NOT_FOUND: 401,
    ErrorKind.NETWORK: 503,
    ErrorKind.PARSING: 502,
    ErrorKind.EMPTY: 502,
    ErrorKind.GENERIC: 500,
}


class BudgetQuery(CamelModel):
    city: str = Field(min_length=1)
    categories: list[str] = Field(
        default_factory=lambda: [c.id for c in BUDGET_CATEGORIES], min_length=1
    )
    currency: str = "USD"
    language: str = "es"
    housing: HousingMode = HousingMode.SHARED

    @field_validator("city")
    @classmethod
    def _city_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("city must not be blank")
        return value.strip()

    @field_validator("categories")
    @classmethod
    def _known_categories(cls, value: list[str]) -> list[str]:
        unknown = [c for c in value if c not in _CATEGORY_IDS]
        if unknown:
            raise ValueError(f"unknown categories: {', '.join(unknown)}")
        return value


class ErrorDetail(CamelModel):
    kind: str
    message: str
    title: str
    guidance: str
    retryable: bool = True
    credential_action: bool = False


class SuggestionsResponse(CamelModel):
    suggestions: list[str]
    degraded: bool = False


def _to_http_exception(error: ServiceError) -> HTTPException:
    guidance = ERROR_GUIDANCE[error.kind]
    detail = ErrorDetail(
        kind=error.kind.value,
        message=error.message,
        title=guidance.title,
        guidance=guidance.fix,
        credential_action=guidance.credential_action,
    )
    return HTTPException(
        status_code=_STATUS_BY_KIND[error.kind],
        detail=detail.model_dump(by_alias=True),
    )


@router.post("/budget", response_model=BudgetResult)
async def create_budget(
    body: BudgetQuery,
    engine: BudgetEngine = Depends(get_budget_engine),
    session: AsyncSession = Depends(get_session),
) -> BudgetResult:
    try:
        return await fetch_budget(
            session,
            engine,
            city=body.city,
            category_ids=body.categories,
            currency_code=body.currency,
            language_code=body.language,
            housing_mode=body.housing,
        )
    except ServiceError as exc:
        raise _to_http_exception(exc) from exc


@router.get("/suggestions", response_model=SuggestionsResponse)
async def list_suggestions(
    q: str = "",
    country: str | None = None,
    region: str | None = None,
    population: PopulationBucket = PopulationBucket.ANY,
    lang: str = "es",
    lat: float | None = None,
    lng: float | None = None,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> SuggestionsResponse:
    location = None
    if lat is not None and lng is not None:
        location = Location(lat=lat, lng=lng)

    request = SuggestionRequest(
        text=q,
        language_code=lang,
        filters=SearchFilters(country=country, region=region, population=population),
        location=location,
    )
    suggestions = await engine.suggest(request)
    return SuggestionsResponse(
        suggestions=list(suggestions),
        degraded=engine.consecutive_failures >= DEGRADED_AFTER_FAILURES,
    )


@router.get("/reference/currencies")
async def list_currencies() -> list[dict[str, Any]]:
    return [asdict(c) for c in CURRENCIES]


@router.get("/reference/languages")
async def list_languages() -> list[dict[str, Any]]:
    return [
        {**asdict(lang), "direction": lang.direction.value} for lang in LANGUAGES
    ]


@router.get("/reference/categories")
async def list_categories() -> list[dict[str, Any]]:
    return [asdict(c) for c in BUDGET_CATEGORIES]
