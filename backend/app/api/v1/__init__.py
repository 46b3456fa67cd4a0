"""Versioned API router."""

from fastapi import APIRouter

from . import auth, health, medicines, routines, takens, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(medicines.router, prefix="/medicines", tags=["medicines"])
router.include_router(routines.router, prefix="/routines", tags=["routines"])
router.include_router(takens.router, prefix="/takens", tags=["takens"])
