import pytest

from ipm_packager.core.errors import PayloadNotFoundError, ProviderStateError
from ipm_packager.core.ipm.models import FileInfo, Node
from ipm_packager.core.providers.contracts import PayloadProvider
from ipm_packager.core.providers.ipm_payload import MatchRule, find_payload_node, rank_payload_matches


def test_resolve_without_root_is_precondition_failure(make_provider):
    p = make_provider(root=None)
    with pytest.raises(ProviderStateError):
        p.resolve("mem://readme.txt")
    # fails before any traversal or byte resolution
    assert p.resolved_locations == []


def test_precondition_failure_is_runtime_error(make_provider):
    with pytest.raises(RuntimeError):
        make_provider(root=None).resolve("anything")


def test_resolve_by_location_returns_bytes(make_provider):
    p = make_provider()
    assert p.resolve("mem://readme.txt").read() == b"hello"


def test_resolve_by_node_identifier(make_provider):
    p = make_provider()
    assert p.resolve("urn:ipm:data").read() == b"a,b\n1,2"


def test_resolve_by_domain_object(make_provider):
    p = make_provider()
    assert p.resolve("urn:domain:readme").read() == b"hello"
    assert p.resolved_locations == ["mem://readme.txt"]


def test_unknown_identifier_names_the_key(make_provider):
    p = make_provider()
    with pytest.raises(PayloadNotFoundError, match="urn:ipm:missing") as ei:
        p.resolve("urn:ipm:missing")
    assert ei.value.identifier == "urn:ipm:missing"
    assert isinstance(ei.value, ValueError)


def test_structural_node_has_no_bytes(make_provider):
    p = make_provider()
    with pytest.raises(PayloadNotFoundError):
        p.resolve("urn:ipm:docs")
    assert p.resolved_locations == []


def test_location_unknown_to_content_source(make_provider):
    p = make_provider(blobs={"mem://data.csv": b"x"})
    with pytest.raises(PayloadNotFoundError, match="urn:ipm:readme"):
        p.resolve("urn:ipm:readme")


def test_io_failure_propagates_unchanged(make_provider):
    p = make_provider(broken={"mem://data.csv"})
    with pytest.raises(OSError, match="cannot read mem://data.csv"):
        p.resolve("urn:ipm:data")


def test_resolve_is_repeatable(make_provider):
    p = make_provider()
    assert p.resolve("mem://data.csv").read() == p.resolve("mem://data.csv").read()
    assert p.resolved_locations == ["mem://data.csv", "mem://data.csv"]


def test_identifier_match_outranks_earlier_location_match():
    root = Node(identifier="urn:ipm:root")
    # walked first, matches "k" by location
    root.add_child(Node(identifier="urn:ipm:a", file_info=FileInfo(location="k")))
    # walked later, matches "k" by identifier
    root.add_child(Node(identifier="k", file_info=FileInfo(location="mem://b")))

    ranked = rank_payload_matches(root, "k")
    assert [(r, n.identifier) for r, n in ranked] == [
        (MatchRule.IDENTIFIER, "k"),
        (MatchRule.LOCATION, "urn:ipm:a"),
    ]
    assert find_payload_node(root, "k").identifier == "k"


def test_same_rule_first_in_walk_order_wins():
    root = Node(identifier="urn:ipm:root")
    first = root.add_child(Node(identifier="urn:ipm:first", domain_object="urn:domain:x"))
    first.add_child(Node(identifier="urn:ipm:deep", domain_object="urn:domain:x"))
    root.add_child(Node(identifier="urn:ipm:second", domain_object="urn:domain:x"))

    assert find_payload_node(root, "urn:domain:x").identifier == "urn:ipm:first"
    assert [n.identifier for _, n in rank_payload_matches(root, "urn:domain:x")] == [
        "urn:ipm:first",
        "urn:ipm:deep",
        "urn:ipm:second",
    ]


def test_no_match_returns_none(sample_tree):
    assert find_payload_node(sample_tree, "nope") is None
    assert rank_payload_matches(sample_tree, "nope") == []


def test_provider_satisfies_payload_provider_protocol(make_provider, sample_tree):
    p = make_provider()
    assert isinstance(p, PayloadProvider)
    assert p.get_payload_model() is sample_tree
