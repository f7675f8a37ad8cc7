from __future__ import annotations

from typing import Optional


class PackagingError(Exception):
    pass


class ProviderStateError(PackagingError, RuntimeError):
    """Provider used before it was fully initialized (e.g. no root node)."""


class PayloadNotFoundError(PackagingError, ValueError):
    def __init__(self, identifier: str):
        super().__init__(f"No bytestream could be resolved for {identifier}")
        self.identifier = identifier


class MalformedSourceError(PackagingError, ValueError):
    pass


class ParametersBuildError(MalformedSourceError):
    pass


class MetadataBuildError(MalformedSourceError):
    pass


class TransformError(PackagingError):
    pass


class TreeStructureError(TransformError):
    pass


class PackageBuildError(PackagingError, RuntimeError):
    """
    Uniform failure surfaced by IpmPackager.build_package.
    The underlying exception is always chained as __cause__.
    """

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class PackageLayoutError(PackagingError, ValueError):
    """Package name or payload paths that cannot be laid out safely inside the package."""
