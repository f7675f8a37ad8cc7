import pytest

from ipm_packager.core.errors import TransformError
from ipm_packager.core.ipm.models import Node
from ipm_packager.core.transform import (
    HAS_DOMAIN_OBJECT,
    HAS_PARENT,
    IS_ROOT,
    LOCATION,
    MEDIA_TYPE,
    SIZE,
    IpmTreeTransformService,
)


def test_tree_becomes_statements(sample_tree):
    g = IpmTreeTransformService().transform(sample_tree)

    assert g.subjects() == ["urn:ipm:root", "urn:ipm:docs", "urn:ipm:readme", "urn:ipm:data"]
    assert g.value("urn:ipm:root", IS_ROOT) == "true"
    assert g.value("urn:ipm:readme", HAS_PARENT) == "urn:ipm:docs"
    assert g.value("urn:ipm:readme", HAS_DOMAIN_OBJECT) == "urn:domain:readme"
    assert g.value("urn:ipm:readme", LOCATION) == "mem://readme.txt"
    assert g.value("urn:ipm:data", SIZE) == "7"
    assert g.value("urn:ipm:data", MEDIA_TYPE) == "text/csv"
    assert g.value("urn:ipm:docs", LOCATION) is None


def test_none_tree_is_a_transform_error():
    with pytest.raises(TransformError):
        IpmTreeTransformService().transform(None)


def test_non_node_input_is_a_transform_error():
    with pytest.raises(TransformError, match="not an IPM tree"):
        IpmTreeTransformService().transform({"identifier": "urn:ipm:root"})


def test_duplicate_identifiers_are_rejected():
    root = Node(identifier="urn:ipm:root")
    root.add_child(Node(identifier="urn:ipm:root"))
    with pytest.raises(TransformError):
        IpmTreeTransformService().transform(root)
