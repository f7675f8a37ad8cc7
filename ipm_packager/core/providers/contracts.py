from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, Any, BinaryIO, Optional, Protocol, TypeVar, Union, runtime_checkable

from ipm_packager.core.ipm.models import Node
from ipm_packager.core.state import Package

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

StreamSource = Union[str, bytes, IO[str], IO[bytes]]


@runtime_checkable
class PayloadProvider(Protocol[T_co]):
    """
    Answers a structural payload model (T), an opaque domain model, and
    resolves URIs found in the payload model to byte streams.

    resolve() raises ValueError for URIs it does not know and OSError for
    known URIs whose bytes cannot be read.
    """

    def get_payload_model(self) -> T_co:
        ...

    def get_domain_model(self) -> Any:
        ...

    def resolve(self, content_uri: str) -> BinaryIO:
        ...


class Policy(Protocol[T_co]):
    """
    Marker for rules influencing how a package is serialized: size limits,
    fetch-by-reference for large files, include/exclude criteria, splitting
    into several bags. Implementations reason over the payload model T.

    No operations are defined yet.
    """


PackageCreationPolicy = Policy


class ContentProvider(ABC):
    """
    Base class for content handed to IpmPackager.

    Use as a context manager (or call close()) so the provider can release
    what it holds once the build is done.
    """

    @abstractmethod
    def get_domain_model(self) -> Any:
        """Domain objects of the content (opaque to the packager)."""

    @abstractmethod
    def get_ipm_model(self) -> Optional[Node]:
        """Root node of the IPM tree."""

    @abstractmethod
    def resolve(self, content_uri: str) -> BinaryIO:
        ...

    def get_payload_model(self) -> Optional[Node]:
        return self.get_ipm_model()

    def close(self) -> None:
        return None

    def __enter__(self) -> "ContentProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Packager(Protocol[T]):
    def build_package(
        self,
        content_provider: ContentProvider,
        metadata_stream: Optional[StreamSource] = None,
        params_stream: Optional[StreamSource] = None,
    ) -> Package:
        ...
