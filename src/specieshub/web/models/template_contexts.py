"""Pydantic models for template context validation.

These models define the context variables every page template needs,
providing type safety and early detection of missing variables.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from starlette.requests import Request

from specieshub.config.models import SpeciesHubConfig
from specieshub.utils.notifications import Notification, pop_notifications


class BaseTemplateContext(BaseModel):
    """Base context required by base.html.j2 template.

    All page templates must provide at least these variables.
    """

    config: SpeciesHubConfig = Field(..., description="Application configuration")
    page_name: str | None = Field(default=None, description="Page title to display in header")
    active_page: str = Field(default="", description="Active navigation item identifier")
    current_user: str | None = Field(default=None, description="Signed-in email, if any")
    notifications: list[Notification] = Field(
        default_factory=list, description="Toasts to show on this page"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_serializer("config")
    def serialize_config(
        self,
        config: SpeciesHubConfig,
        _info: Any,  # noqa: ANN401
    ) -> dict[str, Any]:
        """Serialize config to dict for template access via config['key']."""
        return config.model_dump()

    @classmethod
    def for_request(
        cls,
        request: Request,
        config: SpeciesHubConfig,
        page_name: str | None = None,
        active_page: str = "",
        notifications: list[Notification] | None = None,
    ) -> dict[str, Any]:
        """Build the base context for a page, draining queued session notifications."""
        user = request.user if "user" in request.scope else None
        context = cls(
            config=config,
            page_name=page_name,
            active_page=active_page,
            current_user=user.display_name if user and user.is_authenticated else None,
            notifications=[*pop_notifications(request), *(notifications or [])],
        )
        return context.model_dump()
