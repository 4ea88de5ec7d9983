from __future__ import annotations

import enum

from pydantic import Field

from volare.base.maintenance import RequestTrace
from volare.base.schemas import CamelModel


class HousingMode(enum.Enum):
    SHARED = "shared"
    HOUSE = "house"


class PopulationBucket(enum.Enum):
    ANY = ""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SearchFilters(CamelModel):
    country: str | None = None
    region: str | None = None
    population: PopulationBucket = PopulationBucket.ANY

    def is_set(self) -> bool:
        return bool(
            (self.country and self.country.strip())
            or (self.region and self.region.strip())
            or self.population is not PopulationBucket.ANY
        )


class Coordinates(CamelModel):
    lat: float
    lng: float


class SubItem(CamelModel):
    name: str
    amount: float


class CostItem(CamelModel):
    category: str
    amount: float
    description: str = ""
    explanation: str | None = None
    sub_items: list[SubItem] | None = None


class Source(CamelModel):
    title: str
    uri: str
    snippet: str | None = None


class SavingTip(CamelModel):
    category: str
    tip: str
    icon: str = "💡"


class BudgetResult(CamelModel):
    """One AI-generated cost-of-living estimate.

    `total_monthly` is whatever the model returned. It is supposed to equal the
    sum of `items`, but nothing enforces that; see `items_total`.
    """

    city: str
    currency: str
    currency_symbol: str
    total_monthly: float
    items: list[CostItem]
    sources: list[Source] = Field(default_factory=list)
    summary: str = ""
    saving_tips: list[SavingTip] = Field(default_factory=list)
    coordinates: Coordinates
    trace: RequestTrace | None = None

    @property
    def items_total(self) -> float:
        return sum(item.amount for item in self.items)
