"""
API v1 Router - aggregates the onboarding endpoints.
"""
from fastapi import APIRouter

from onboarding.api.v1 import admin, payments, settings, staff, students

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        502: {"description": "Upstream Service Error"},
    }
)

router.include_router(students.router)
router.include_router(payments.router)
router.include_router(staff.router)
router.include_router(admin.router)
router.include_router(settings.router)
