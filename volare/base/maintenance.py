from __future__ import annotations

from pydantic import ConfigDict

from volare.base.schemas import CamelModel


class RequestTrace(CamelModel):
    """Attached to every BudgetResult. Timing and model info for one fetch."""

    model_config = ConfigDict(protected_namespaces=())

    model_name: str
    duration_seconds: float | None = None
    corrections_applied: int = 0
