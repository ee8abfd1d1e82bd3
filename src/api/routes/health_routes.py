"""
Health check route - public, no authentication required.
"""
from fastapi import APIRouter, Depends

from api.dependencies import get_provider, get_settings

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
async def health_check(settings=Depends(get_settings), provider=Depends(get_provider)):
    """
    Report which parts of the configuration are in place.
    Does not call Google.
    """
    health = {
        "status": "healthy",
        "service": "Substation Repair Recorder API",
        "version": "1.0.0",
        "components": {
            "auth_mode": provider.mode,
            "sheet": "configured" if settings.sheet_id else "missing",
            "drive_root_folder": "configured" if settings.drive_root_folder_id else "missing",
            "extraction": "configured" if settings.google_api_key else "missing",
        },
    }

    if not settings.sheet_id:
        health["status"] = "degraded"

    return health
