"""Species Hub configuration package.

This package provides centralized configuration management with:
- Validation through Pydantic models
- Smart defaults for a fresh install
- YAML parsing and serialization
"""

from .manager import ConfigManager
from .models import SpeciesHubConfig

__all__ = [
    "ConfigManager",
    "SpeciesHubConfig",
]
