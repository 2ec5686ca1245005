import os
from pathlib import Path

# Installed package directory; templates and static assets ship inside it.
PACKAGE_DIR = Path(__file__).resolve().parent.parent


class PathResolver:
    """Central authority for all file path resolution in Species Hub.

    Uses environment variables for configuration with sensible defaults.
    """

    def __init__(self) -> None:
        """Initialize PathResolver with environment-based configuration."""
        self.app_dir = Path(os.getenv("SPECIESHUB_APP", str(PACKAGE_DIR)))
        self.data_dir = Path(os.getenv("SPECIESHUB_DATA", "/var/lib/specieshub"))

    def get_specieshub_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks SPECIESHUB_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("SPECIESHUB_CONFIG")
        if config_path:
            return Path(config_path)

        return self.data_dir / "config" / "specieshub.yaml"

    def get_data_dir(self) -> Path:
        """Get the data directory path.

        Returns:
            Path to the data directory where all runtime data is stored.
        """
        return self.data_dir

    def get_database_dir(self) -> Path:
        """Get the directory for database files."""
        return self.data_dir / "database"

    def get_database_path(self) -> Path:
        """Get the path to the main SQLite database."""
        return self.data_dir / "database" / "specieshub.db"

    # Web application paths (in app directory)
    def get_static_dir(self) -> Path:
        """Get the directory for static web assets."""
        return self.app_dir / "web" / "static"

    def get_templates_dir(self) -> Path:
        """Get the directory for HTML templates."""
        return self.app_dir / "web" / "templates"

    def get_static_file_path(self, relative_path: str) -> Path:
        """Resolve a path relative to the static directory.

        Args:
            relative_path: Path below the static directory (e.g. 'sample_animals.csv')

        Returns:
            Absolute path to the static file
        """
        return self.get_static_dir() / relative_path.lstrip("/")
