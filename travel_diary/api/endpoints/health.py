"""Liveness and readiness endpoints."""

import os
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from travel_diary import __version__
from travel_diary.api.deps import AppSettings, Media, Store

router = APIRouter(tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", summary="Liveness check")
async def health_check(settings: AppSettings) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": _now(),
        "environment": settings.APP_ENV,
        "version": __version__,
        "gemini": "configured" if settings.gemini_enabled else "disabled",
    }


@router.get("/health/ready", summary="Readiness check")
async def readiness_check(store: Store, media_storage: Media) -> Dict[str, Any]:
    """Check that the travel file parses and the upload directory is writable.

    A corrupt travel file reads as an empty list, so the raw file is
    parsed here as well.
    """
    checks: Dict[str, Dict[str, Any]] = {}

    try:
        checks["travel_store"] = {
            "status": "healthy",
            "path": str(store.path),
            "travel_count": store.count(),
        }
    except Exception as e:
        checks["travel_store"] = {"status": "unhealthy", "path": str(store.path), "message": str(e)}

    upload_dir = media_storage.upload_dir
    writable = upload_dir.is_dir() and os.access(upload_dir, os.W_OK)
    checks["uploads"] = {
        "status": "healthy" if writable else "unhealthy",
        "path": str(upload_dir),
    }

    ready = all(check["status"] == "healthy" for check in checks.values())
    return {
        "status": "ready" if ready else "not_ready",
        "timestamp": _now(),
        "checks": checks,
    }
