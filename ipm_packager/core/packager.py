from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ipm_packager.core.config import PackagerSettings, load_packager_settings
from ipm_packager.core.errors import PackageBuildError
from ipm_packager.core.generation import PackageGenerationService, ZipPackageGenerationService
from ipm_packager.core.metadata import build_metadata
from ipm_packager.core.observability.metrics import record_build
from ipm_packager.core.params.generation import GenerationParameters, build_parameters
from ipm_packager.core.params.names import (
    BAGIT_PROFILE_ID,
    PACKAGE_FORMAT_ID,
    PACKAGE_LOCATION,
    PACKAGE_NAME,
)
from ipm_packager.core.properties import PropertiesSource
from ipm_packager.core.providers.contracts import ContentProvider
from ipm_packager.core.state import Package, PackageState
from ipm_packager.core.transform import IpmTreeTransformService, TreeTransformService

_log = logging.getLogger("ipm.packager")


class IpmPackager:
    """
    Creates a package from a content provider, metadata and generation
    parameters.

    The name and location of produced packages default to the loaded
    PackagerSettings and may be changed (plain attributes) before a build.
    Parameters found in the params stream override them.
    """

    def __init__(
        self,
        transform_service: Optional[TreeTransformService] = None,
        generation_service: Optional[PackageGenerationService] = None,
        *,
        settings: Optional[PackagerSettings] = None,
    ):
        settings = settings or load_packager_settings()
        self.transform_service = transform_service or IpmTreeTransformService()
        self.generation_service = generation_service or ZipPackageGenerationService()

        self.package_location: str = settings.package_location
        self.package_name: str = settings.package_name
        self.package_format_id: str = settings.package_format_id
        self.bagit_profile_id: str = settings.bagit_profile_id

    def build_package(
        self,
        content_provider: ContentProvider,
        metadata_stream: Optional[PropertiesSource] = None,
        params_stream: Optional[PropertiesSource] = None,
    ) -> Package:
        stage = "acquire"
        try:
            with content_provider as provider:
                state = PackageState()

                stage = "domain_model"
                state.domain_model = provider.get_domain_model()

                stage = "ipm_model"
                state.ipm_tree = provider.get_ipm_model()

                stage = "transform"
                state.package_tree = self.transform_service.transform(state.ipm_tree)

                stage = "metadata"
                state.package_metadata = build_metadata(metadata_stream)

                stage = "parameters"
                params = self.get_generation_parameters(params_stream)

                stage = "generate"
                state.content_resolver = provider.resolve
                package = self.generation_service.generate_package(state, params)
        except Exception as e:
            _log.error("Package build failed at stage=%s: %s", stage, e)
            record_build("failed", stage=stage)
            raise PackageBuildError(str(e) or type(e).__name__, stage=stage) from e

        record_build("succeeded")
        _log.info("Built package %s at %s", package.name, package.path)
        return package

    def required_defaults(self) -> Dict[str, List[str]]:
        return {
            PACKAGE_LOCATION: [self.package_location],
            PACKAGE_NAME: [self.package_name],
            PACKAGE_FORMAT_ID: [self.package_format_id],
            BAGIT_PROFILE_ID: [self.bagit_profile_id],
        }

    def get_generation_parameters(self, params_stream: Optional[PropertiesSource] = None) -> GenerationParameters:
        """
        Package-Location and Package-Name are required by the serializer; they
        (and the format/profile identifiers) are filled from this packager's
        attributes when the stream is None or does not supply them.
        """
        return build_parameters(params_stream, self.required_defaults())
