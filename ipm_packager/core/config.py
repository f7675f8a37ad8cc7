"""
Packager defaults.

Resolution order (later wins):
  1) built-in defaults (temp dir, "MyPackage", BOREM, DC profile)
  2) optional YAML/JSON defaults file
  3) environment variables

Defaults file format (YAML or JSON):
    package_location: /var/packages
    package_name: Nightly
    package_format_id: BOREM
    bagit_profile_id: http://dataconservancy.org/formats/data-conservancy-pkg-1.0

Environment variables:
    IPM_PACKAGER_CONFIG: path to the defaults file (optional).
                         Default search path: <project_root>/packager_defaults.yaml
    IPM_PACKAGE_LOCATION, IPM_PACKAGE_NAME, IPM_PACKAGE_FORMAT_ID, IPM_BAGIT_PROFILE_ID
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ipm_packager.core.params.names import (
    DEFAULT_BAGIT_PROFILE_ID,
    DEFAULT_PACKAGE_FORMAT_ID,
    DEFAULT_PACKAGE_NAME,
)

_log = logging.getLogger("ipm.config")

_ENV_FIELDS = {
    "IPM_PACKAGE_LOCATION": "package_location",
    "IPM_PACKAGE_NAME": "package_name",
    "IPM_PACKAGE_FORMAT_ID": "package_format_id",
    "IPM_BAGIT_PROFILE_ID": "bagit_profile_id",
}


class PackagerSettings(BaseModel):
    package_location: str = Field(default_factory=tempfile.gettempdir)
    package_name: str = DEFAULT_PACKAGE_NAME
    package_format_id: str = DEFAULT_PACKAGE_FORMAT_ID
    bagit_profile_id: str = DEFAULT_BAGIT_PROFILE_ID


def _resolve_path(path: Optional[Path]) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv("IPM_PACKAGER_CONFIG", "").strip()
    if env_path:
        return Path(env_path)
    project_root = Path(__file__).resolve().parents[2]
    return project_root / "packager_defaults.yaml"


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read packager defaults file %s: %s", path, exc)
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse packager defaults %s as JSON or YAML: %s", path, exc)
            return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        _log.warning("Packager defaults file %s must be a mapping, got %s", path, type(data).__name__)
        return {}
    return data


def load_packager_settings(path: Optional[Path] = None) -> PackagerSettings:
    resolved = _resolve_path(path)
    data = {
        k: v
        for k, v in _load_file(resolved).items()
        if k in PackagerSettings.model_fields and v is not None
    }

    for env_key, field_name in _ENV_FIELDS.items():
        val = os.getenv(env_key, "").strip()
        if val:
            data[field_name] = val

    try:
        settings = PackagerSettings(**{k: str(v) for k, v in data.items()})
    except ValidationError as exc:
        _log.warning("Ignoring invalid packager defaults from %s: %s", resolved, exc)
        return PackagerSettings()

    if data:
        _log.info("Loaded packager defaults (%s) from %s/env", ", ".join(sorted(data)), resolved)
    return settings
