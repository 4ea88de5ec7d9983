from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from volare.corrections.models import CorrectionLog, UserCorrection

logger = logging.getLogger(__name__)

STORAGE_KEY = "volare_user_corrections"
MAX_CORRECTIONS = 50

_PROMPT_HEADER = (
    "USER FEEDBACK CONTEXT (Please refine your response based on these past "
    "user reports):"
)
_PROMPT_FOOTER = (
    "Please prioritize accuracy regarding these specific points in your new "
    "generated content."
)


async def _load_log(
    session: AsyncSession, storage_key: str, *, for_update: bool = False
) -> CorrectionLog | None:
    stmt = select(CorrectionLog).where(CorrectionLog.storage_key == storage_key)
    if for_update:
        stmt = stmt.with_for_update()
    return (await session.execute(stmt)).scalar_one_or_none()


async def record_correction(
    session: AsyncSession,
    correction: UserCorrection,
    *,
    storage_key: str = STORAGE_KEY,
) -> list[UserCorrection]:
    """Append a correction and drop everything but the newest MAX_CORRECTIONS.

    The caller is responsible for committing the session.
    """
    log = await _load_log(session, storage_key, for_update=True)
    if log is None:
        log = CorrectionLog(storage_key=storage_key, corrections=[])
        session.add(log)

    # Reassign rather than mutate so the JSON column is marked dirty.
    log.corrections = [*log.corrections, correction][-MAX_CORRECTIONS:]
    await session.flush()

    logger.info(
        "Recorded correction for %s/%s (%d stored)",
        correction.city or "all cities",
        correction.category,
        len(log.corrections),
    )
    return list(log.corrections)


async def get_corrections(
    session: AsyncSession, *, storage_key: str = STORAGE_KEY
) -> list[UserCorrection]:
    log = await _load_log(session, storage_key)
    if log is None:
        return []
    return list(log.corrections)


def filter_relevant(
    corrections: Sequence[UserCorrection],
    city: str,
    language_code: str | None,
) -> list[UserCorrection]:
    """Corrections for this city (any case) or for no city, in this language.

    A `language_code` of None matches every language.
    """
    wanted = city.strip().lower()
    return [
        c
        for c in corrections
        if (not c.city or c.city.strip().lower() == wanted)
        and (language_code is None or c.language_code == language_code)
    ]


async def get_relevant_corrections(
    session: AsyncSession,
    city: str,
    language_code: str,
    *,
    storage_key: str = STORAGE_KEY,
) -> list[UserCorrection]:
    corrections = await get_corrections(session, storage_key=storage_key)
    return filter_relevant(corrections, city, language_code)


def _format_line(correction: UserCorrection) -> str:
    parts = [
        f'- For {correction.city or "all cities"} in category '
        f'"{correction.category}": User reported "{correction.reason.value}"'
    ]
    if correction.suggested_translation:
        parts.append(f'(Suggested translation: "{correction.suggested_translation}")')
    if correction.comment:
        parts.append(f'with comment: "{correction.comment}"')
    return " ".join(parts)


def format_corrections_for_prompt(corrections: Sequence[UserCorrection]) -> str:
    """Render corrections as a prompt addendum. Empty string when there are none."""
    if not corrections:
        return ""

    lines = [_format_line(c) for c in corrections]
    return "\n\n" + "\n".join([_PROMPT_HEADER, *lines, _PROMPT_FOOTER])
