"""System domain package.

This package contains system-level components:
- PathResolver: Path resolution and management
- StructlogConfigurator: Structured logging configuration
"""

from taxonpreview.system.path_resolver import PathResolver
from taxonpreview.system import structlog_configurator

__all__ = [
    "PathResolver",
    "structlog_configurator",
]
