from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional

from ipm_packager.core.ipm.models import Node

ContentResolver = Callable[[str], BinaryIO]


@dataclass
class PackageState:
    """Per-build state handed to the package generation service."""

    domain_model: Any = None
    ipm_tree: Optional[Node] = None
    package_tree: Any = None
    package_metadata: Dict[str, List[str]] = field(default_factory=dict)
    content_resolver: Optional[ContentResolver] = None


@dataclass(frozen=True)
class Package:
    name: str
    path: Path
    format_id: str
    content_type: str = "application/zip"
    size: int = 0

    def open(self) -> BinaryIO:
        return self.path.open("rb")

    def serialize(self) -> bytes:
        return self.path.read_bytes()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "format_id": self.format_id,
            "content_type": self.content_type,
            "size": self.size,
        }
