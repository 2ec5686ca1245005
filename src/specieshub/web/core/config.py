"""Configuration access for the web application."""

from specieshub.config import ConfigManager, SpeciesHubConfig
from specieshub.system.path_resolver import PathResolver


def get_config(path_resolver: PathResolver | None = None) -> SpeciesHubConfig:
    """Load Species Hub configuration.

    Args:
        path_resolver: Optional PathResolver instance to use. If not provided,
                      creates a new PathResolver instance.

    Returns:
        SpeciesHubConfig: The loaded and validated configuration.
    """
    if path_resolver is None:
        path_resolver = PathResolver()
    return ConfigManager(path_resolver).load()
