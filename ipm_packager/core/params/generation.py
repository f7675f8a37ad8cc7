from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from ipm_packager.core.errors import ParametersBuildError
from ipm_packager.core.properties import PropertiesSource, parse_properties, split_values

_log = logging.getLogger("ipm.params")

DefaultValue = Union[str, Iterable[str]]


class GenerationParameters:
    """
    Ordered name -> [values] mapping. The first value of a parameter is the
    canonical one; some parameters (e.g. Checksum-Algs) carry several.
    """

    def __init__(self, params: Optional[Mapping[str, Iterable[str]]] = None):
        self._params: Dict[str, List[str]] = {}
        for k, v in (params or {}).items():
            self._params[k] = list(v)

    def get_param(self, name: str) -> Optional[List[str]]:
        return self._params.get(name)

    def get_first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        values = self._params.get(name)
        return values[0] if values else default

    def add_param(self, name: str, value: str) -> None:
        self._params.setdefault(name, []).append(value)

    def set_param(self, name: str, values: Iterable[str]) -> None:
        self._params[name] = list(values)

    def remove_param(self, name: str) -> None:
        self._params.pop(name, None)

    def keys(self) -> List[str]:
        return list(self._params.keys())

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._params.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenerationParameters):
            return NotImplemented
        return self._params == other._params

    def __repr__(self) -> str:
        return f"GenerationParameters({self._params!r})"


class PropertiesParametersBuilder:
    """Builds GenerationParameters from a properties source; values are comma-split."""

    def build_parameters(self, source: PropertiesSource) -> GenerationParameters:
        try:
            props = parse_properties(source)
        except (ValueError, TypeError) as e:
            # UnicodeDecodeError and PropertiesSyntaxError are ValueErrors
            raise ParametersBuildError(f"package generation parameters could not be built: {e}") from e

        params = GenerationParameters()
        for key, raw in props.items():
            params.set_param(key, [v for v in split_values(raw) if v])
        return params


def _as_values(value: DefaultValue) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def build_parameters(
    source: Optional[PropertiesSource],
    required_defaults: Mapping[str, DefaultValue],
) -> GenerationParameters:
    """
    Parse `source` (may be None) and fill every key of `required_defaults`
    that is missing or empty. Values present in the source always win.
    """
    if source is None:
        params = GenerationParameters()
    else:
        params = PropertiesParametersBuilder().build_parameters(source)

    for key, default in required_defaults.items():
        if not params.get_param(key):
            values = _as_values(default)
            _log.debug("Defaulting generation parameter %s=%s", key, values)
            params.set_param(key, values)

    return params
