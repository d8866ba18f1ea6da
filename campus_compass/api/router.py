"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from campus_compass.api.routes import auth, events, registrations, universities

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(universities.router)
api_router.include_router(events.router)
api_router.include_router(registrations.router)
