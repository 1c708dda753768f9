"""
API Router

All endpoints are mounted under /api by the application factory.
"""

from fastapi import APIRouter

from shutterclub_shared.schemas.common import ErrorResponse

from . import auth, competitions, galleries, organizations, photos, users

router = APIRouter(
    responses={
        status: {"model": ErrorResponse} for status in (400, 401, 403, 404)
    }
)

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(photos.router, prefix="/photos", tags=["Photos"])
router.include_router(galleries.router, prefix="/galleries", tags=["Galleries"])
router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(competitions.router, prefix="/competitions", tags=["Competitions"])
