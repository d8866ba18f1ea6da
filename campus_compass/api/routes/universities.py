"""
University reference data endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.db.session import get_db
from campus_compass.schemas.university import UniversityResponse
from campus_compass.services.university_service import (
    list_universities, get_university, get_default_university,
)

router = APIRouter(prefix="/universities", tags=["Universities"])


@router.get("/", response_model=list[UniversityResponse])
async def list_universities_endpoint(db: AsyncSession = Depends(get_db)):
    """All universities, by name. Served from cache when available."""
    return await list_universities(db)


@router.get("/default", response_model=UniversityResponse)
async def default_university_endpoint(db: AsyncSession = Depends(get_db)):
    return await get_default_university(db)


@router.get("/{university_id}", response_model=UniversityResponse)
async def get_university_endpoint(university_id: str, db: AsyncSession = Depends(get_db)):
    return await get_university(db, university_id)
