from __future__ import annotations

import tempfile

from fastapi import APIRouter
from starlette.responses import JSONResponse

from ipm_packager.core.config import load_packager_settings
from ipm_packager.core.observability.metrics import inc_named

router = APIRouter()


@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive"}


@router.get("/api/v1/health/ready")
def readiness():
    """
    Ready when the default package location is writable.
    """
    inc_named("health_ready")
    problems: list[str] = []

    location = load_packager_settings().package_location
    try:
        with tempfile.NamedTemporaryFile(dir=location, prefix=".ipm_ready_"):
            pass
    except OSError as e:
        problems.append(f"package_location_not_writable:{location} err={type(e).__name__}")

    if problems:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": problems},
        )

    return {"status": "ready"}
