from __future__ import annotations

from pydantic import BaseModel, Field


class _CitySuggestionsSchema(BaseModel):
    """Internal Pydantic schema for structured LLM output: city suggestions."""

    cities: list[str] = Field(
        default_factory=list,
        description="Up to 5 real city names, written in the requested language",
    )
