"""Species-speed chart view."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from specieshub.config import SpeciesHubConfig
from specieshub.speed.chart import render_speed_chart_json
from specieshub.speed.dataset import SpeedDatasetLoader
from specieshub.utils.auth import require_login
from specieshub.web.core.container import Container
from specieshub.web.models.template_contexts import BaseTemplateContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_class=HTMLResponse)
@require_login
@inject
async def species_speed_view(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    speed_dataset_loader: Annotated[
        SpeedDatasetLoader, Depends(Provide[Container.speed_dataset_loader])
    ],
) -> HTMLResponse:
    """Render the animal speed bar chart.

    The CSV is read on every render; empty or unreadable data renders the
    page without a chart.
    """
    data = await speed_dataset_loader.load()
    context = {
        **BaseTemplateContext.for_request(
            request, config, "Species Speed", active_page="species_speed"
        ),
        "chart_json": render_speed_chart_json(data),
        "animal_count": len(data),
    }
    return templates.TemplateResponse(request, "species_speed/index.html.j2", context)
