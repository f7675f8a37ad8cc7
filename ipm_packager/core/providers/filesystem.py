from __future__ import annotations

import hashlib
import logging
import mimetypes
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional
from urllib.parse import unquote, urlparse

from ipm_packager.core.ipm.models import FileInfo, Node
from ipm_packager.core.providers.ipm_payload import IpmPayloadProvider

_log = logging.getLogger("ipm.provider.fs")

IPM_URN_PREFIX = "urn:ipm:"
DOMAIN_URN_PREFIX = "urn:domain:"


def _digests(path: Path) -> Dict[str, str]:
    sha = hashlib.sha256()
    md5 = hashlib.md5()
    with path.open("rb") as fp:
        for chunk in iter(lambda: fp.read(1024 * 1024), b""):
            sha.update(chunk)
            md5.update(chunk)
    return {"sha256": sha.hexdigest(), "md5": md5.hexdigest()}


def _rel_key(root: Path, p: Path) -> str:
    rel = p.relative_to(root).as_posix()
    return "/" if rel == "." else rel


def build_ipm_tree(root_dir: Path) -> Node:
    """One node per directory and file under root_dir, children sorted by name."""
    root_dir = Path(root_dir).resolve()

    def _node_for(p: Path) -> Node:
        key = _rel_key(root_dir, p)
        if p.is_dir():
            info = FileInfo(location=p.as_uri(), name=p.name, is_directory=True)
        else:
            media_type, _ = mimetypes.guess_type(p.name)
            info = FileInfo(
                location=p.as_uri(),
                name=p.name,
                size=p.stat().st_size,
                checksums=_digests(p),
                media_type=media_type or "application/octet-stream",
            )
        return Node(
            identifier=f"{IPM_URN_PREFIX}{key}",
            domain_object=f"{DOMAIN_URN_PREFIX}{key}",
            file_info=info,
        )

    root = _node_for(root_dir)
    stack = [(root_dir, root)]
    while stack:
        d, parent = stack.pop()
        for child in sorted(d.iterdir(), key=lambda c: c.name):
            if child.is_symlink():
                continue
            n = parent.add_child(_node_for(child))
            if child.is_dir():
                stack.append((child, n))
    return root


class FilesystemContentProvider(IpmPayloadProvider):
    """
    Serves the files below `root_dir`. Locations are file:// URIs; anything
    outside the root (or another scheme) is unknown to this provider.
    """

    def __init__(self, root_dir: Path, *, domain_model: Any = None):
        self.root_dir = Path(root_dir).resolve()
        if not self.root_dir.is_dir():
            raise NotADirectoryError(f"content root is not a directory: {self.root_dir}")
        super().__init__(build_ipm_tree(self.root_dir))
        self._domain_model = domain_model
        self._open: List[BinaryIO] = []

    def get_domain_model(self) -> Any:
        return self._domain_model

    def _path_for(self, location: str) -> Optional[Path]:
        parsed = urlparse(location)
        if parsed.scheme != "file":
            return None
        p = Path(unquote(parsed.path)).resolve()
        if p != self.root_dir and self.root_dir not in p.parents:
            return None
        return p

    def resolve_location(self, location: str) -> Optional[BinaryIO]:
        p = self._path_for(location)
        if p is None:
            return None
        if p.is_dir():
            # known, but a directory has no bytestream
            return None
        fp = p.open("rb")
        self._open.append(fp)
        return fp

    def close(self) -> None:
        still_open = [fp for fp in self._open if not fp.closed]
        for fp in still_open:
            fp.close()
        if still_open:
            _log.debug("Closed %d payload streams left open under %s", len(still_open), self.root_dir)
        self._open = []
