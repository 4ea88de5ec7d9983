from __future__ import annotations

from volare.budget.models import HousingMode, PopulationBucket, SearchFilters
from volare.reference import CurrencyOption, LanguageOption

HOUSING_DESCRIPTIONS: dict[HousingMode, str] = {
    HousingMode.SHARED: "Room in a shared flat (frugal)",
    HousingMode.HOUSE: "Small whole house/apartment (standard)",
}

POPULATION_DESCRIPTIONS: dict[PopulationBucket, str] = {
    PopulationBucket.SMALL: "small towns (under 100,000 inhabitants)",
    PopulationBucket.MEDIUM: "medium-sized cities (100,000 to 1 million inhabitants)",
    PopulationBucket.LARGE: "large cities (over 1 million inhabitants)",
}

BUDGET_PROMPT_TEMPLATE = """Provide the ABSOLUTE MINIMUM monthly cost of living in {city} for a single person.
Categories to include (and no others): {categories}.
Housing mode: {housing}.

Rules:
1. All amounts in {currency_label} ({currency_code}).
2. Descriptions, explanations, summary and tips in {language_name}.
3. Use real-time data for the cheapest realistic options (student housing, local markets, discount chains). Do not use averages; report frugal-market bottom prices.
4. totalMonthly MUST be the exact sum of the item amounts.
5. Include 3-4 "savingTips" that are hyper-local hacks for this specific city.
6. For every web source you rely on, add a one-sentence snippet to "sourceSnippets", keyed by the source title.

Format: JSON
{{
  "city": "{city}",
  "currency": "{currency_code}",
  "currencySymbol": "{currency_symbol}",
  "totalMonthly": number,
  "summary": "String",
  "items": [{{"category": "String", "amount": number, "description": "String", "explanation": "String"}}],
  "savingTips": [{{"category": "String", "tip": "String", "icon": "Emoji"}}],
  "coordinates": {{"lat": number, "lng": number}},
  "sourceSnippets": {{"Source title": "String"}}
}}{corrections}"""

SUGGESTION_PROMPT_TEMPLATE = """Suggest up to 5 real city names matching "{text}".
{constraints}
Write every city name in {language_name}. Return only the names."""


def build_budget_prompt(
    *,
    city: str,
    category_ids: tuple[str, ...] | list[str],
    housing_mode: HousingMode,
    currency: CurrencyOption,
    language: LanguageOption,
    corrections_addendum: str = "",
) -> str:
    """Build the grounded budget prompt. The addendum is appended verbatim."""
    return BUDGET_PROMPT_TEMPLATE.format(
        city=city,
        categories=", ".join(category_ids),
        housing=HOUSING_DESCRIPTIONS[housing_mode],
        currency_label=currency.label,
        currency_code=currency.code,
        currency_symbol=currency.symbol,
        language_name=language.name,
        corrections=corrections_addendum,
    )


def build_suggestion_prompt(
    *,
    text: str,
    language: LanguageOption,
    filters: SearchFilters,
    lat: float | None = None,
    lng: float | None = None,
) -> str:
    constraints: list[str] = []
    if filters.country and filters.country.strip():
        constraints.append(f"Country: {filters.country.strip()}.")
    if filters.region and filters.region.strip():
        constraints.append(f"Region: {filters.region.strip()}.")
    if filters.population is not PopulationBucket.ANY:
        constraints.append(
            f"Only {POPULATION_DESCRIPTIONS[filters.population]}."
        )
    if lat is not None and lng is not None:
        constraints.append(
            f"Prefer cities close to latitude {lat:.4f}, longitude {lng:.4f}."
        )

    return SUGGESTION_PROMPT_TEMPLATE.format(
        text=text,
        constraints="\n".join(constraints) if constraints else "No filters.",
        language_name=language.name,
    )
