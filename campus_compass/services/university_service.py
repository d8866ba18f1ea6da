"""
University lookups. The list is small, static and read on every page load,
so it goes through the reference-data cache.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.core.config import get_settings
from campus_compass.core.errors import NotFoundError
from campus_compass.models.university import University
from campus_compass.schemas.university import UniversityResponse
from campus_compass.services import cache_service


async def list_universities(db: AsyncSession) -> list[UniversityResponse]:
    cached = await cache_service.get_cached(cache_service.UNIVERSITIES_KEY)
    if cached is not None:
        return [UniversityResponse(**item) for item in cached]

    result = await db.execute(select(University).order_by(University.name.asc()))
    universities = [UniversityResponse.model_validate(u) for u in result.scalars().all()]

    await cache_service.set_cached(
        cache_service.UNIVERSITIES_KEY,
        [u.model_dump() for u in universities],
    )
    return universities


async def get_university(db: AsyncSession, university_id: str) -> University:
    university = await db.get(University, university_id)
    if university is None:
        raise NotFoundError(f"University {university_id} not found")
    return university


async def get_default_university(db: AsyncSession) -> University:
    university = await db.get(University, get_settings().DEFAULT_UNIVERSITY_ID)
    if university is None:
        raise NotFoundError("Default university not found")
    return university
