from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ipm_packager.core.errors import PackageBuildError
from ipm_packager.core.observability.metrics import inc_named
from ipm_packager.core.packager import IpmPackager
from ipm_packager.core.properties import dump_properties
from ipm_packager.core.providers.filesystem import FilesystemContentProvider

router = APIRouter(tags=["packages"])

PropertyValues = Dict[str, Union[str, List[str]]]


class PackageBuildRequest(BaseModel):
    content_dir: str = Field(..., description="Local directory whose files become the package payload")
    metadata: Optional[PropertyValues] = Field(default=None, description="Package metadata (bag-info)")
    params: Optional[PropertyValues] = Field(default=None, description="Package generation parameters")
    package_name: Optional[str] = None
    package_location: Optional[str] = None


class PackageBuildResponse(BaseModel):
    kind: str
    name: str
    path: str
    format_id: str
    content_type: str
    size: int


@router.post("/api/v1/packages/build", response_model=PackageBuildResponse)
def build_package(payload: PackageBuildRequest):
    inc_named("api_package_build")

    root = Path(payload.content_dir)
    if not root.is_dir():
        raise HTTPException(status_code=404, detail=f"Content directory not found: {root}")

    packager = IpmPackager()
    if payload.package_name:
        packager.package_name = payload.package_name
    if payload.package_location:
        packager.package_location = payload.package_location

    metadata = dump_properties(payload.metadata) if payload.metadata is not None else None
    params = dump_properties(payload.params) if payload.params is not None else None

    try:
        pkg = packager.build_package(FilesystemContentProvider(root), metadata, params)
    except PackageBuildError as e:
        raise HTTPException(status_code=400, detail=f"Package build failed at {e.stage}: {e}")
    except OSError as e:
        # scanning the content directory happens before the build pipeline starts
        raise HTTPException(status_code=400, detail=f"Content directory could not be read: {e}")

    return {"kind": "package_build", **pkg.to_dict()}
