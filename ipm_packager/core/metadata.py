from __future__ import annotations

from typing import Dict, List, Optional

from ipm_packager.core.errors import MetadataBuildError
from ipm_packager.core.params.names import RESERVED_METADATA_KEYS
from ipm_packager.core.properties import PropertiesSource, parse_properties, split_values


def build_metadata(source: Optional[PropertiesSource]) -> Dict[str, List[str]]:
    """
    Package metadata from a properties source. Multi-valued entries are
    comma separated. The manifest and profile identifiers are dropped since
    the packager supplies them itself.
    """
    if source is None:
        return {}

    try:
        props = parse_properties(source)
    except (ValueError, TypeError) as e:
        raise MetadataBuildError(f"package metadata could not be read: {e}") from e

    return {
        key: split_values(value)
        for key, value in props.items()
        if key not in RESERVED_METADATA_KEYS
    }
