"""Configuration loading for the web application."""

from taxonpreview.config import ConfigManager, PreviewConfig
from taxonpreview.system.path_resolver import PathResolver


def get_config(path_resolver: PathResolver | None = None) -> PreviewConfig:
    """Load taxonpreview configuration.

    Args:
        path_resolver: Optional PathResolver instance to use. If not provided,
                      creates a new PathResolver instance.

    Returns:
        PreviewConfig: The loaded and validated configuration.
    """
    if path_resolver is None:
        path_resolver = PathResolver()
    return ConfigManager(path_resolver).load()
