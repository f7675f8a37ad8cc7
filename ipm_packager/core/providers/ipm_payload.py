from __future__ import annotations

import logging
from abc import abstractmethod
from enum import IntEnum
from typing import BinaryIO, List, Optional, Tuple

from ipm_packager.core.errors import PayloadNotFoundError, ProviderStateError
from ipm_packager.core.ipm.models import Node
from ipm_packager.core.providers.contracts import ContentProvider

_log = logging.getLogger("ipm.resolver")


class MatchRule(IntEnum):
    # lower value = higher priority
    IDENTIFIER = 0
    LOCATION = 1
    DOMAIN_OBJECT = 2


def match_rule(node: Node, key: str) -> Optional[MatchRule]:
    if node.identifier == key:
        return MatchRule.IDENTIFIER
    if node.file_info is not None and node.file_info.location == key:
        return MatchRule.LOCATION
    if node.domain_object is not None and node.domain_object == key:
        return MatchRule.DOMAIN_OBJECT
    return None


def rank_payload_matches(root: Node, key: str) -> List[Tuple[MatchRule, Node]]:
    """
    All nodes matching `key`, ordered by rule priority and then by
    depth-first walk order.
    """
    hits: List[Tuple[MatchRule, int, Node]] = []
    for pos, node in enumerate(root.walk()):
        rule = match_rule(node, key)
        if rule is not None:
            hits.append((rule, pos, node))
    hits.sort(key=lambda h: (h[0], h[1]))
    return [(rule, node) for rule, _, node in hits]


def find_payload_node(root: Node, key: str) -> Optional[Node]:
    ranked = rank_payload_matches(root, key)
    if not ranked:
        return None
    if len(ranked) > 1:
        _log.warning(
            "%d IPM nodes match %s; using %s (matched by %s)",
            len(ranked), key, ranked[0][1].identifier, ranked[0][0].name.lower(),
        )
    return ranked[0][1]


class IpmPayloadProvider(ContentProvider):
    """
    Content provider over an IPM tree.

    resolve() walks the tree for a node whose identifier, file location or
    domain object equals the requested URI, then hands the node's file
    location to resolve_location(). Subclasses only need to know how to turn
    a location into bytes.
    """

    def __init__(self, root_node: Optional[Node] = None):
        self.root_node = root_node

    def get_ipm_model(self) -> Optional[Node]:
        return self.root_node

    def resolve(self, content_uri: str) -> BinaryIO:
        if self.root_node is None:
            raise ProviderStateError("'root_node' must not be None.")

        node = find_payload_node(self.root_node, content_uri)

        stream: Optional[BinaryIO] = None
        if node is not None and node.file_info is not None:
            # OSError propagates: location known but unreadable
            stream = self.resolve_location(node.file_info.location)

        if stream is None:
            raise PayloadNotFoundError(content_uri)

        _log.debug("Resolved %s via node %s", content_uri, node.identifier)
        return stream

    @abstractmethod
    def resolve_location(self, location: str) -> Optional[BinaryIO]:
        """
        Bytes for a FileInfo location, or None if the location is unknown to
        this provider. Raise OSError if it is known but cannot be read.
        """
