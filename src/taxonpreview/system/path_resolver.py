import os
from pathlib import Path


class PathResolver:
    """Central authority for all file path resolution in taxonpreview.

    Uses environment variables for configuration with sensible defaults.
    """

    def __init__(self) -> None:
        """Initialize PathResolver with environment-based configuration."""
        self.package_dir = Path(__file__).resolve().parent.parent
        self.data_dir = Path(os.getenv("TAXONPREVIEW_DATA", "~/.local/share/taxonpreview"))
        self.data_dir = self.data_dir.expanduser()

    def get_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks TAXONPREVIEW_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("TAXONPREVIEW_CONFIG")
        if config_path:
            return Path(config_path)

        return self.data_dir / "config" / "taxonpreview.yaml"

    def get_data_dir(self) -> Path:
        """Get the data directory path."""
        return self.data_dir

    def get_templates_dir(self) -> Path:
        """Get the directory for the popup and page templates shipped with the package."""
        return self.package_dir / "templates"
