from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Protocol, Tuple

from ipm_packager.core.errors import TransformError
from ipm_packager.core.ipm.models import Node, validate_tree

Triple = Tuple[str, str, str]

IPM_NS = "ipm:"
HAS_PARENT = IPM_NS + "hasParent"
HAS_DOMAIN_OBJECT = IPM_NS + "hasDomainObject"
LOCATION = IPM_NS + "location"
NAME = IPM_NS + "name"
SIZE = IPM_NS + "size"
MEDIA_TYPE = IPM_NS + "mediaType"
IS_DIRECTORY = IPM_NS + "isDirectory"
IS_ROOT = IPM_NS + "isRoot"
CHECKSUM_PREFIX = IPM_NS + "checksum/"


class TreeTransformService(Protocol):
    def transform(self, root: Node) -> Any:
        """Tree -> domain representation. Raises TransformError on invalid trees."""
        ...


@dataclass
class PackageTreeGraph:
    """Ordered (subject, predicate, object) statements describing an IPM tree."""

    triples: List[Triple] = field(default_factory=list)

    def add(self, s: str, p: str, o: Any) -> None:
        self.triples.append((s, p, str(o)))

    def objects(self, subject: str, predicate: str) -> List[str]:
        return [o for s, p, o in self.triples if s == subject and p == predicate]

    def value(self, subject: str, predicate: str) -> Optional[str]:
        objs = self.objects(subject, predicate)
        return objs[0] if objs else None

    def subjects(self) -> List[str]:
        return list(dict.fromkeys(s for s, _, _ in self.triples))

    def __iter__(self) -> Iterator[Triple]:
        return iter(self.triples)

    def __len__(self) -> int:
        return len(self.triples)


class IpmTreeTransformService:
    def transform(self, root: Node) -> PackageTreeGraph:
        try:
            validate_tree(root)
        except AttributeError as e:
            raise TransformError(f"not an IPM tree: {type(root).__name__}") from e

        g = PackageTreeGraph()
        for n in root.walk():
            if n.is_root:
                g.add(n.identifier, IS_ROOT, "true")
            else:
                g.add(n.identifier, HAS_PARENT, n.parent_identifier)
            if n.domain_object is not None:
                g.add(n.identifier, HAS_DOMAIN_OBJECT, n.domain_object)

            fi = n.file_info
            if fi is None:
                continue
            g.add(n.identifier, LOCATION, fi.location)
            if fi.name:
                g.add(n.identifier, NAME, fi.name)
            if fi.is_directory:
                g.add(n.identifier, IS_DIRECTORY, "true")
            if fi.size is not None:
                g.add(n.identifier, SIZE, fi.size)
            if fi.media_type:
                g.add(n.identifier, MEDIA_TYPE, fi.media_type)
            for alg, digest in sorted(fi.checksums.items()):
                g.add(n.identifier, CHECKSUM_PREFIX + alg, digest)
        return g
