"""API routes mounted under API_PREFIX (default /api)."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, categories, events, notifications, profile, registrations

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(registrations.router, prefix="/registrations", tags=["registrations"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
