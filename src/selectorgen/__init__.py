from __future__ import annotations

from .errors import (
    GenerationTimeoutError,
    InvalidInputError,
    SelectorGenerationError,
    UnresolvableSelectorError,
)
from .generator import SelectorGenerator, generate_selector
from .models import Descriptor, GeneratorOptions
from .providers import DescriptorProvider, ProviderChain, ProviderKind
from .rendering import render_path

__version__ = "0.1.0"

__all__ = [
    "Descriptor",
    "DescriptorProvider",
    "GenerationTimeoutError",
    "GeneratorOptions",
    "InvalidInputError",
    "ProviderChain",
    "ProviderKind",
    "SelectorGenerationError",
    "SelectorGenerator",
    "UnresolvableSelectorError",
    "generate_selector",
    "render_path",
]
