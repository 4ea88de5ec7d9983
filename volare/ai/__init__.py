import os

import httpx
from langchain_google_genai import ChatGoogleGenerativeAI

from volare.ai.connectivity import HttpConnectivityProbe
from volare.ai.interface import BudgetEngine, ConnectivityProbe, SuggestionEngine
from volare.ai.langchain_engine import (
    DEFAULT_MODEL,
    LangChainBudgetEngine,
    LangChainSuggestionEngine,
)

MODEL_NAME = os.environ.get("VOLARE_MODEL", DEFAULT_MODEL)


def _make_llm(temperature: float) -> ChatGoogleGenerativeAI:
    # API key comes from GOOGLE_API_KEY.
    return ChatGoogleGenerativeAI(model=MODEL_NAME, temperature=temperature)


def create_connectivity_probe() -> ConnectivityProbe:
    """Create a connectivity probe with a fresh HTTP client."""
    return HttpConnectivityProbe.create(httpx.AsyncClient(follow_redirects=True))


def create_budget_engine() -> BudgetEngine:
    """Create the grounded budget engine using Google Gemini."""
    return LangChainBudgetEngine(
        _make_llm(temperature=0.2),
        create_connectivity_probe(),
        model_name=MODEL_NAME,
    )


def create_suggestion_engine() -> SuggestionEngine:
    """Create the city suggestion engine using Google Gemini."""
    return LangChainSuggestionEngine(_make_llm(temperature=0))
