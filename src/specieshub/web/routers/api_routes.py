"""JSON endpoints: health, authentication status and catalog reads."""

import logging
from datetime import UTC, datetime
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from specieshub.database.core import DatabaseService
from specieshub.species.repository import SpeciesRepository, SpeciesStoreError
from specieshub.web.core.container import Container
from specieshub.web.models.api import (
    AuthStatusResponse,
    HealthCheckResponse,
    SpeciesListResponse,
    SpeciesResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_version() -> str:
    """Get the installed application version."""
    try:
        return version("specieshub")
    except PackageNotFoundError:
        return "unknown"


def require_api_user(request: Request) -> str:
    """Return the signed-in account id, or answer 401."""
    if not request.user.is_authenticated:
        raise HTTPException(status_code=401, detail="Authentication required")
    return request.user.user_id


@router.get("/health", response_model=HealthCheckResponse)
@inject
async def health_check(
    response: Response,
    core_database: Annotated[DatabaseService, Depends(Provide[Container.core_database])],
) -> HealthCheckResponse:
    """Check service liveness and database connectivity.

    Returns:
        Health status with timestamp and version; 503 when the database is unreachable.
    """
    database_ok = await core_database.ping()
    if not database_ok:
        response.status_code = 503
    return HealthCheckResponse(
        status="healthy" if database_ok else "unhealthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=get_version(),
        database="ok" if database_ok else "unavailable",
    )


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(request: Request) -> AuthStatusResponse:
    """Check authentication status.

    Returns:
        Authenticated flag and the signed-in email, if any
    """
    return AuthStatusResponse(
        authenticated=request.user.is_authenticated,
        username=request.user.display_name if request.user.is_authenticated else None,
    )


@router.get("/species", response_model=SpeciesListResponse)
@inject
async def list_species(
    _user_id: Annotated[str, Depends(require_api_user)],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
) -> SpeciesListResponse:
    """List every species record."""
    try:
        rows = await species_repository.list_species()
    except SpeciesStoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return SpeciesListResponse(
        species=[SpeciesResponse.model_validate(row) for row in rows],
        count=len(rows),
    )


@router.get("/species/{species_id}", response_model=SpeciesResponse)
@inject
async def get_species(
    species_id: int,
    _user_id: Annotated[str, Depends(require_api_user)],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
) -> SpeciesResponse:
    """Return one species record (404 when the id is unknown)."""
    try:
        species = await species_repository.get_species(species_id)
    except SpeciesStoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    if species is None:
        raise HTTPException(status_code=404, detail="Species not found")
    return SpeciesResponse.model_validate(species)
