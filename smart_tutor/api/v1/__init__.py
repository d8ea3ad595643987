"""
API v1 routes.
"""

from fastapi import APIRouter

from smart_tutor.api.v1 import practice

router = APIRouter()

router.include_router(practice.router, prefix="/practice", tags=["Practice"])
