"""Application factory for creating FastAPI application with dependency injection."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.authentication import AuthenticationMiddleware
from starsessions import CookieStore, SessionMiddleware, SessionStore
from starsessions.stores.redis import RedisStore

from specieshub.config import SpeciesHubConfig
from specieshub.utils.auth import SessionAuthBackend
from specieshub.web.core.container import Container
from specieshub.web.core.lifespan import lifespan
from specieshub.web.middleware.request_logging import StructuredRequestLoggingMiddleware
from specieshub.web.routers import (
    api_routes,
    auth_routes,
    species_speed_view_routes,
    species_view_routes,
)


def create_session_store(container: Container, config: SpeciesHubConfig) -> SessionStore:
    """Pick the session store named by ``session.backend``."""
    if config.session.backend == "redis":
        return RedisStore(connection=container.redis_client(), prefix="specieshub:session:")
    return CookieStore(secret_key=config.session.secret_key)


def create_app() -> FastAPI:
    """Create FastAPI application with dependency injection.

    This factory function creates a fully configured FastAPI application with:
    - Dependency injection container setup
    - Session and authentication middleware
    - All routers properly configured with prefixes and tags
    - Lifespan management for service startup and shutdown

    Returns:
        FastAPI: The configured application instance.
    """
    # Create container
    container = Container()
    config = container.config()

    app = FastAPI(
        lifespan=lifespan,
        title="Species Hub API",
        description="API for browsing and editing the species catalog",
        version="1.0.0",
        redoc_url=None,
    )

    # Attach container for lifespan and tests (runtime dynamic attribute)
    app.container = container  # type: ignore[attr-defined]

    # Middleware added last runs first: logging wraps sessions, sessions wrap auth
    app.add_middleware(AuthenticationMiddleware, backend=SessionAuthBackend())
    app.add_middleware(
        SessionMiddleware,
        store=create_session_store(container, config),
        cookie_name=config.session.cookie_name,
        lifetime=config.session.lifetime_seconds,
        cookie_https_only=config.session.https_only,
        cookie_same_site="lax",
    )
    app.add_middleware(StructuredRequestLoggingMiddleware)

    app.mount(
        "/static",
        StaticFiles(directory=str(container.path_resolver().get_static_dir())),
        name="static",
    )

    # Wire dependencies for all router modules
    container.wire(
        modules=[
            "specieshub.web.routers.api_routes",
            "specieshub.web.routers.auth_routes",
            "specieshub.web.routers.species_speed_view_routes",
            "specieshub.web.routers.species_view_routes",
        ]
    )

    # === API Routes (included in documentation) ===
    app.include_router(api_routes.router, prefix="/api", tags=["Species API"])

    # === View Routes (excluded from API documentation) ===
    app.include_router(auth_routes.router, tags=["Auth Views"], include_in_schema=False)
    app.include_router(
        species_view_routes.router,
        prefix="/species",
        tags=["Species Views"],
        include_in_schema=False,
    )
    app.include_router(
        species_speed_view_routes.router,
        prefix="/species-speed",
        tags=["Species Speed Views"],
        include_in_schema=False,
    )

    return app
