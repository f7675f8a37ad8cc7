import io
from pathlib import Path
from typing import Dict, Optional, Set

import pytest
from fastapi.testclient import TestClient

from ipm_packager.api.main import app
from ipm_packager.core.ipm.models import FileInfo, Node
from ipm_packager.core.observability.metrics import reset_metrics
from ipm_packager.core.providers.ipm_payload import IpmPayloadProvider


class InMemoryPayloadProvider(IpmPayloadProvider):
    """Serves bytes from a dict keyed by FileInfo location."""

    def __init__(self, root_node: Optional[Node], blobs: Dict[str, bytes], *, broken: Set[str] = frozenset()):
        super().__init__(root_node)
        self.blobs = blobs
        self.broken = set(broken)
        self.domain_model = {"kind": "test-domain"}
        self.close_calls = 0
        self.resolved_locations = []

    def get_domain_model(self):
        return self.domain_model

    def resolve_location(self, location):
        self.resolved_locations.append(location)
        if location in self.broken:
            raise OSError(f"cannot read {location}")
        data = self.blobs.get(location)
        return io.BytesIO(data) if data is not None else None

    def close(self):
        self.close_calls += 1


@pytest.fixture(autouse=True)
def _isolate_packager_config(monkeypatch, tmp_path):
    # No developer defaults file or env leaks into tests
    monkeypatch.setenv("IPM_PACKAGER_CONFIG", str(tmp_path / "no_such_defaults.yaml"))
    for k in ("IPM_PACKAGE_LOCATION", "IPM_PACKAGE_NAME", "IPM_PACKAGE_FORMAT_ID", "IPM_BAGIT_PROFILE_ID"):
        monkeypatch.delenv(k, raising=False)
    reset_metrics()


@pytest.fixture()
def sample_tree():
    """
    root (structural)
      +- docs (structural)
      |    +- readme  -> mem://readme.txt
      +- data.csv     -> mem://data.csv
    """
    root = Node(identifier="urn:ipm:root", domain_object="urn:domain:collection")
    docs = root.add_child(Node(identifier="urn:ipm:docs", domain_object="urn:domain:docs"))
    docs.add_child(
        Node(
            identifier="urn:ipm:readme",
            domain_object="urn:domain:readme",
            file_info=FileInfo(location="mem://readme.txt", name="readme.txt", size=5, media_type="text/plain"),
        )
    )
    root.add_child(
        Node(
            identifier="urn:ipm:data",
            domain_object="urn:domain:data",
            file_info=FileInfo(location="mem://data.csv", name="data.csv", size=7, media_type="text/csv"),
        )
    )
    return root


@pytest.fixture()
def sample_blobs():
    return {"mem://readme.txt": b"hello", "mem://data.csv": b"a,b\n1,2"}


@pytest.fixture()
def make_provider(sample_tree, sample_blobs):
    def _make(root=sample_tree, blobs=None, broken=frozenset()):
        return InMemoryPayloadProvider(root, dict(sample_blobs if blobs is None else blobs), broken=broken)

    return _make


@pytest.fixture()
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    (root / "docs").mkdir(parents=True)
    (root / "docs" / "readme.txt").write_text("hello", encoding="utf-8")
    (root / "data.csv").write_text("a,b\n1,2", encoding="utf-8")
    return root


@pytest.fixture()
def client():
    return TestClient(app)
