from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Self, Sequence

import httpx

from volare.budget.models import BudgetResult, HousingMode, SearchFilters
from volare.corrections.models import UserCorrection


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float


@dataclass(frozen=True)
class SuggestionRequest:
    text: str
    language_code: str
    filters: SearchFilters = field(default_factory=SearchFilters)
    location: Location | None = None


@dataclass(frozen=True)
class BudgetRequest:
    city: str
    category_ids: tuple[str, ...]
    currency_code: str
    language_code: str
    housing_mode: HousingMode = HousingMode.SHARED
    corrections: tuple[UserCorrection, ...] = ()


class SuggestionEngine(ABC):
    @property
    @abstractmethod
    def consecutive_failures(self) -> int: ...

    @abstractmethod
    async def suggest(self, request: SuggestionRequest) -> Sequence[str]: ...


class BudgetEngine(ABC):
    @abstractmethod
    async def fetch_budget(self, request: BudgetRequest) -> BudgetResult: ...


class ConnectivityProbe(ABC):
    @classmethod
    @abstractmethod
    def create(cls, client: httpx.AsyncClient) -> Self: ...

    @abstractmethod
    async def is_online(self) -> bool: ...
