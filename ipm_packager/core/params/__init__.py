from .generation import GenerationParameters, PropertiesParametersBuilder, build_parameters
from . import names

__all__ = [
    "GenerationParameters",
    "PropertiesParametersBuilder",
    "build_parameters",
    "names",
]
