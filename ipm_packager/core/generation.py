from __future__ import annotations

import hashlib
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Tuple

from ipm_packager.core.errors import PackageLayoutError, ProviderStateError
from ipm_packager.core.ipm.models import Node
from ipm_packager.core.params.generation import GenerationParameters
from ipm_packager.core.params.names import (
    BAGIT_PROFILE_ID,
    CHECKSUM_ALGS,
    DEFAULT_BAGIT_PROFILE_ID,
    DEFAULT_CHECKSUM_ALG,
    DEFAULT_PACKAGE_FORMAT_ID,
    DEFAULT_PACKAGE_NAME,
    PACKAGE_FORMAT_ID,
    PACKAGE_LOCATION,
    PACKAGE_NAME,
)
from ipm_packager.core.state import Package, PackageState

_log = logging.getLogger("ipm.generation")

BAGIT_VERSION = "0.97"
_CHUNK = 1024 * 1024


class PackageGenerationService(Protocol):
    def generate_package(self, state: PackageState, params: GenerationParameters) -> Package:
        ...


def _check_segment(segment: str, what: str) -> str:
    if not segment or segment in (".", "..") or "/" in segment or "\\" in segment:
        raise PackageLayoutError(f"{what} {segment!r} is not a plain file name")
    return segment


def check_package_name(name: str) -> str:
    """The package name becomes both the zip file name and its top folder."""
    _check_segment(name, "package name")
    if ".." in name:
        raise PackageLayoutError(f"package name {name!r} must not contain '..'")
    return name


def payload_entries(root: Node) -> List[Tuple[str, Node]]:
    """
    (relative path, node) for every file node, in walk order.

    Raises PackageLayoutError when a path segment is not a plain name or two
    nodes would be written to the same path.
    """
    out: List[Tuple[str, Node]] = []
    seen: Dict[str, str] = {}
    for n in root.walk():
        if n.file_info is None or n.file_info.is_directory:
            continue
        parts = [
            (p.file_info.name if p.file_info and p.file_info.name else p.identifier.rsplit("/", 1)[-1])
            for p in n.path_from_root()[1:]
        ]
        if not parts:
            # a root that is itself a file
            parts = [n.file_info.name or "payload"]
        rel = "/".join(_check_segment(p, "payload path segment") for p in parts)
        if rel in seen:
            raise PackageLayoutError(f"duplicate payload path data/{rel} for {seen[rel]} and {n.identifier}")
        seen[rel] = n.identifier
        out.append((rel, n))
    return out


def _bag_info_lines(metadata: Dict[str, List[str]], profile_id: str, oxum: str) -> Iterable[str]:
    for key, values in metadata.items():
        for v in values:
            yield f"{key}: {v}"
    yield f"{BAGIT_PROFILE_ID}: {profile_id}"
    yield f"Bagging-Date: {datetime.now(timezone.utc).date().isoformat()}"
    yield f"Payload-Oxum: {oxum}"


class ZipPackageGenerationService:
    """
    Writes <Package-Location>/<Package-Name>.zip laid out as a bag:
    bagit.txt, bag-info.txt, data/... and one manifest-<alg>.txt per
    Checksum-Algs value.
    """

    def generate_package(self, state: PackageState, params: GenerationParameters) -> Package:
        if state.content_resolver is None:
            raise ProviderStateError("package state has no content resolver")
        if state.ipm_tree is None:
            raise ProviderStateError("package state has no IPM tree")

        location = Path(params.get_first(PACKAGE_LOCATION) or ".")
        name = check_package_name(params.get_first(PACKAGE_NAME) or DEFAULT_PACKAGE_NAME)
        format_id = params.get_first(PACKAGE_FORMAT_ID) or DEFAULT_PACKAGE_FORMAT_ID
        profile_id = params.get_first(BAGIT_PROFILE_ID) or DEFAULT_BAGIT_PROFILE_ID
        algs = [a.lower() for a in (params.get_param(CHECKSUM_ALGS) or [DEFAULT_CHECKSUM_ALG])]
        for alg in algs:
            hashlib.new(alg)  # fail before writing anything
        entries = payload_entries(state.ipm_tree)

        location.mkdir(parents=True, exist_ok=True)
        zip_path = location / f"{name}.zip"

        manifests: Dict[str, List[str]] = {alg: [] for alg in algs}
        total_bytes = 0

        try:
            with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for rel, node in entries:
                    arcname = f"{name}/data/{rel}"
                    hashers = {alg: hashlib.new(alg) for alg in algs}
                    with state.content_resolver(node.identifier) as src, zf.open(arcname, "w") as dst:
                        for chunk in iter(lambda: src.read(_CHUNK), b""):
                            dst.write(chunk)
                            total_bytes += len(chunk)
                            for h in hashers.values():
                                h.update(chunk)
                    for alg, h in hashers.items():
                        manifests[alg].append(f"{h.hexdigest()}  data/{rel}")

                zf.writestr(f"{name}/bagit.txt", f"BagIt-Version: {BAGIT_VERSION}\nTag-File-Character-Encoding: UTF-8\n")
                oxum = f"{total_bytes}.{len(entries)}"
                bag_info = "\n".join(_bag_info_lines(state.package_metadata, profile_id, oxum)) + "\n"
                zf.writestr(f"{name}/bag-info.txt", bag_info)
                for alg, lines in manifests.items():
                    zf.writestr(f"{name}/manifest-{alg}.txt", "".join(line + "\n" for line in lines))
        except BaseException:
            # no partial package on failure
            zip_path.unlink(missing_ok=True)
            raise

        size = zip_path.stat().st_size
        _log.info("Wrote package %s (%d payload files, %d bytes)", zip_path, len(entries), size)
        return Package(name=name, path=zip_path, format_id=format_id, size=size)
