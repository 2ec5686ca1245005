"""Dependency injection container for the Species Hub application."""

import redis.asyncio as aioredis
from dependency_injector import containers, providers
from fastapi.templating import Jinja2Templates
from jinja2 import StrictUndefined

from specieshub.database.core import DatabaseService
from specieshub.species.editor import SpeciesEditor
from specieshub.species.repository import SpeciesRepository
from specieshub.speed.dataset import SpeedDatasetLoader
from specieshub.system.path_resolver import PathResolver
from specieshub.utils.auth import AccountService
from specieshub.web.core.config import get_config


def create_jinja2_templates(resolver: PathResolver) -> Jinja2Templates:
    """Create Jinja2Templates with dynamic path from resolver and strict undefined handling.

    Configures Jinja2 to raise errors on undefined variables, making missing
    template context obvious during development.
    """
    templates = Jinja2Templates(directory=str(resolver.get_templates_dir()))
    templates.env.undefined = StrictUndefined
    return templates


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Services are configured as singletons or factories based on their usage patterns.
    """

    # Core infrastructure services - singletons
    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        get_config,
        path_resolver=path_resolver,
    )

    templates = providers.Singleton(
        create_jinja2_templates,
        resolver=path_resolver,
    )

    database_path = providers.Factory(
        lambda resolver: resolver.get_database_path(),
        resolver=path_resolver,
    )

    core_database = providers.Singleton(
        DatabaseService,
        db_path=database_path,
    )

    # Redis client for session storage when session.backend is "redis"
    redis_client = providers.Singleton(
        lambda c: aioredis.Redis.from_url(c.session.redis_url),
        c=config,
    )

    # Authentication services
    account_service = providers.Singleton(
        AccountService,
        core_database=core_database,
    )

    # Species catalog
    species_repository = providers.Singleton(
        SpeciesRepository,
        core_database=core_database,
    )

    species_editor = providers.Factory(
        SpeciesEditor,
        species_repository=species_repository,
        config=config,
    )

    # Species-speed chart data
    speed_dataset_loader = providers.Factory(
        SpeedDatasetLoader,
        config=config,
        path_resolver=path_resolver,
    )
