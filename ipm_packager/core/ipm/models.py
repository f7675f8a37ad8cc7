from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from ipm_packager.core.errors import TreeStructureError


@dataclass
class FileInfo:
    location: str
    name: Optional[str] = None
    size: Optional[int] = None
    checksums: Dict[str, str] = field(default_factory=dict)  # alg -> hex digest
    media_type: Optional[str] = None
    is_directory: bool = False

    @property
    def is_file(self) -> bool:
        return not self.is_directory


@dataclass(eq=False)
class Node:
    """
    One entity of the IPM (intermediate package model) tree.

    Nodes without file_info are structural (containers). Nodes compare by
    identity; use `identifier` for lookups.
    """

    identifier: str
    domain_object: Optional[str] = None
    file_info: Optional[FileInfo] = None
    parent: Optional["Node"] = field(default=None, repr=False)
    children: List["Node"] = field(default_factory=list, repr=False)

    @property
    def parent_identifier(self) -> Optional[str]:
        return self.parent.identifier if self.parent is not None else None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def add_child(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def walk(self) -> Iterator["Node"]:
        """Depth-first, pre-order, left-to-right."""
        stack: List[Node] = [self]
        seen: Set[int] = set()
        while stack:
            n = stack.pop()
            if id(n) in seen:
                # cycle guard; validate_tree reports these properly
                continue
            seen.add(id(n))
            yield n
            stack.extend(reversed(n.children))

    def find(self, identifier: str) -> Optional["Node"]:
        for n in self.walk():
            if n.identifier == identifier:
                return n
        return None

    def path_from_root(self) -> List["Node"]:
        out: List[Node] = []
        cur: Optional[Node] = self
        while cur is not None:
            out.append(cur)
            cur = cur.parent
        out.reverse()
        return out


def validate_tree(root: Optional[Node]) -> None:
    """
    Checks tree structure: one root, no cycles, unique identifiers and
    consistent parent links.
    """
    if root is None:
        raise TreeStructureError("tree root must not be None")
    if root.parent is not None:
        raise TreeStructureError(f"root node {root.identifier} has a parent ({root.parent_identifier})")

    visited: Set[int] = set()
    identifiers: Set[str] = set()
    stack: List[Node] = [root]
    while stack:
        n = stack.pop()
        if id(n) in visited:
            raise TreeStructureError(f"cycle or shared child detected at node {n.identifier}")
        visited.add(id(n))

        if not n.identifier:
            raise TreeStructureError("node identifier must not be empty")
        if n.identifier in identifiers:
            raise TreeStructureError(f"duplicate node identifier: {n.identifier}")
        identifiers.add(n.identifier)

        for c in n.children:
            if c.parent is not n:
                raise TreeStructureError(
                    f"node {c.identifier} is a child of {n.identifier} but points at parent {c.parent_identifier}"
                )
            stack.append(c)
