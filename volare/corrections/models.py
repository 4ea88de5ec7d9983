from __future__ import annotations

import enum
import time

from pydantic import ConfigDict, Field
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from volare.base.models import BaseDbModel
from volare.base.schemas import CamelModel, PydanticJSONB


class CorrectionReason(enum.Enum):
    TOO_HIGH = "too_high"
    TOO_LOW = "too_low"
    OUTDATED = "outdated"
    INCORRECT = "incorrect"


def _now_millis() -> int:
    return int(time.time() * 1000)


class UserCorrection(CamelModel):
    """A user's "this line looks wrong" report. Never mutated once stored."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    category: str
    language_code: str
    reason: CorrectionReason
    comment: str = ""
    suggested_translation: str | None = None
    timestamp_millis: int = Field(default_factory=_now_millis)


class CorrectionLog(BaseDbModel):
    """Capped, append-only correction list stored as one JSON value per key."""

    __tablename__ = "correction_logs"

    storage_key: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    corrections: Mapped[list[UserCorrection]] = mapped_column(
        PydanticJSONB(list[UserCorrection]), nullable=False, default=list
    )
