from .contracts import ContentProvider, PackageCreationPolicy, Packager, PayloadProvider, Policy
from .ipm_payload import IpmPayloadProvider, MatchRule, find_payload_node, rank_payload_matches
from .filesystem import FilesystemContentProvider, build_ipm_tree

__all__ = [
    "ContentProvider",
    "FilesystemContentProvider",
    "IpmPayloadProvider",
    "MatchRule",
    "PackageCreationPolicy",
    "Packager",
    "PayloadProvider",
    "Policy",
    "build_ipm_tree",
    "find_payload_node",
    "rank_payload_matches",
]
