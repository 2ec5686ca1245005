"""JSON API response models."""

from pydantic import BaseModel, ConfigDict, Field

from specieshub.species.models import Kingdom


class SpeciesResponse(BaseModel):
    """One species record as returned by the JSON API."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Species record id")
    scientific_name: str = Field(..., description="Scientific (binomial) name")
    common_name: str | None = Field(None, description="Common name")
    kingdom: Kingdom = Field(..., description="Taxonomic kingdom")
    total_population: int | None = Field(None, description="Estimated total population")
    image: str | None = Field(None, description="Image URL")
    description: str | None = Field(None, description="Free-text description")
    author: str | None = Field(None, description="Id of the account that created the record")


class SpeciesListResponse(BaseModel):
    """Every species record in the catalog."""

    species: list[SpeciesResponse]
    count: int


class HealthCheckResponse(BaseModel):
    """Response for the health check endpoint."""

    status: str = Field(..., description="Health status (healthy/unhealthy)")
    timestamp: str = Field(..., description="ISO timestamp of health check")
    version: str = Field(..., description="Application version")
    database: str = Field(..., description="Database status (ok/unavailable)")


class AuthStatusResponse(BaseModel):
    """Authentication state of the current session."""

    authenticated: bool
    username: str | None = None
