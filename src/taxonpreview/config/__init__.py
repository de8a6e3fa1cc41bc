"""taxonpreview configuration package.

This package provides centralized configuration management with:
- Pydantic models with validated defaults
- YAML parsing and serialization
"""

from .manager import ConfigManager
from .models import PreviewConfig

__all__ = [
    "ConfigManager",
    "PreviewConfig",
]
