from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from volare.base.dependencies import get_session
from volare.corrections.models import UserCorrection
from volare.corrections.store import (
    filter_relevant,
    get_corrections,
    record_correction,
)

router = APIRouter(prefix="/corrections")


@router.post("", response_model=UserCorrection, status_code=201)
async def create_correction(
    body: UserCorrection,
    session: AsyncSession = Depends(get_session),
) -> UserCorrection:
    await record_correction(session, body)
    return body


@router.get("", response_model=list[UserCorrection])
async def list_corrections(
    city: str | None = None,
    lang: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> list[UserCorrection]:
    corrections = await get_corrections(session)
    if city is not None:
        return filter_relevant(corrections, city, lang)
    if lang is not None:
        return [c for c in corrections if c.language_code == lang]
    return corrections
