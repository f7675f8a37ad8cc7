import pytest

from ipm_packager.core.errors import TransformError, TreeStructureError
from ipm_packager.core.ipm.models import FileInfo, Node, validate_tree


def test_walk_is_depth_first_left_to_right(sample_tree):
    ids = [n.identifier for n in sample_tree.walk()]
    assert ids == ["urn:ipm:root", "urn:ipm:docs", "urn:ipm:readme", "urn:ipm:data"]


def test_parent_identifier_and_root_flags(sample_tree):
    readme = sample_tree.find("urn:ipm:readme")
    assert readme is not None
    assert readme.parent_identifier == "urn:ipm:docs"
    assert readme.is_leaf
    assert sample_tree.is_root
    assert sample_tree.parent_identifier is None
    assert [n.identifier for n in readme.path_from_root()] == ["urn:ipm:root", "urn:ipm:docs", "urn:ipm:readme"]


def test_find_missing_returns_none(sample_tree):
    assert sample_tree.find("urn:ipm:nope") is None


def test_file_info_is_file():
    assert FileInfo(location="x").is_file
    assert not FileInfo(location="x", is_directory=True).is_file


def test_validate_tree_accepts_sample(sample_tree):
    validate_tree(sample_tree)


def test_validate_tree_rejects_none():
    with pytest.raises(TreeStructureError):
        validate_tree(None)


def test_validate_tree_rejects_duplicate_identifiers():
    root = Node(identifier="urn:ipm:root")
    root.add_child(Node(identifier="urn:ipm:dup"))
    root.add_child(Node(identifier="urn:ipm:dup"))
    with pytest.raises(TreeStructureError, match="duplicate"):
        validate_tree(root)


def test_validate_tree_rejects_root_with_parent(sample_tree):
    docs = sample_tree.find("urn:ipm:docs")
    with pytest.raises(TreeStructureError, match="has a parent"):
        validate_tree(docs)


def test_validate_tree_rejects_inconsistent_parent_link():
    root = Node(identifier="urn:ipm:root")
    other = Node(identifier="urn:ipm:other")
    child = Node(identifier="urn:ipm:child", parent=other)
    root.children.append(child)
    with pytest.raises(TreeStructureError, match="points at parent"):
        validate_tree(root)


def test_validate_tree_rejects_shared_child():
    root = Node(identifier="urn:ipm:root")
    a = root.add_child(Node(identifier="urn:ipm:a"))
    b = root.add_child(Node(identifier="urn:ipm:b"))
    shared = a.add_child(Node(identifier="urn:ipm:shared"))
    b.children.append(shared)
    with pytest.raises(TreeStructureError):
        validate_tree(root)


def test_tree_structure_error_is_transform_error():
    assert issubclass(TreeStructureError, TransformError)
