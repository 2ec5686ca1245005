"""Species catalog views: list, learn-more detail, add and edit dialogs."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from specieshub.config import SpeciesHubConfig
from specieshub.species.editor import EditOutcome, EditStatus, SpeciesEditor
from specieshub.species.forms import SpeciesForm
from specieshub.species.models import Species
from specieshub.species.repository import SpeciesRepository, SpeciesStoreError
from specieshub.utils.auth import require_login
from specieshub.utils.notifications import Notification, push_notification
from specieshub.web.core.container import Container
from specieshub.web.models.template_contexts import BaseTemplateContext

logger = logging.getLogger(__name__)

router = APIRouter()

# HTTP status for each failed submission
FAILURE_STATUS_CODES = {
    EditStatus.VALIDATION_ERROR: 422,
    EditStatus.NOT_AUTHOR: 403,
    EditStatus.LOCKED: 403,
    EditStatus.BACKEND_ERROR: 503,
}


async def _load_species(species_repository: SpeciesRepository, species_id: int) -> Species:
    try:
        species = await species_repository.get_species(species_id)
    except SpeciesStoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    if species is None:
        raise HTTPException(status_code=404, detail="Species not found")
    return species


def _render_form(
    request: Request,
    templates: Jinja2Templates,
    config: SpeciesHubConfig,
    form: SpeciesForm,
    *,
    species: Species | None = None,
    outcome: EditOutcome | None = None,
) -> HTMLResponse:
    """Render the add or edit dialog, with the failure notification if any."""
    notifications = [outcome.notification] if outcome and outcome.notification else []
    page_name = f"Edit {species.get_display_name()}" if species else "Add Species"
    context = {
        **BaseTemplateContext.for_request(
            request, config, page_name, active_page="species", notifications=notifications
        ),
        "form": form,
        "species": species,
        "action": f"/species/{species.id}/edit" if species else "/species/new",
        "submit_label": "Edit Species" if species else "Add Species",
    }
    status_code = FAILURE_STATUS_CODES.get(outcome.status, 200) if outcome else 200
    return templates.TemplateResponse(
        request, "species/form.html.j2", context, status_code=status_code
    )


def _finish_submission(
    request: Request,
    templates: Jinja2Templates,
    config: SpeciesHubConfig,
    outcome: EditOutcome,
    species: Species | None = None,
) -> HTMLResponse | RedirectResponse:
    if outcome.ok:
        if outcome.notification:
            push_notification(request, outcome.notification)
        return RedirectResponse(url="/species", status_code=303)
    return _render_form(request, templates, config, outcome.form, species=species, outcome=outcome)


@router.get("", response_class=HTMLResponse)
@require_login
@inject
async def species_list(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    species_editor: Annotated[SpeciesEditor, Depends(Provide[Container.species_editor])],
) -> HTMLResponse:
    """Render every species as a card with a learn-more dialog.

    A store failure renders an empty list with an error notification.
    """
    notifications: list[Notification] = []
    try:
        species = await species_repository.list_species()
    except SpeciesStoreError as e:
        species = []
        notifications.append(Notification("Something went wrong.", str(e), "destructive"))

    user_id = request.user.user_id
    context = {
        **BaseTemplateContext.for_request(
            request, config, "Species", active_page="species", notifications=notifications
        ),
        "species_list": species,
        "editable_ids": [s.id for s in species if species_editor.can_edit(user_id, s)],
    }
    return templates.TemplateResponse(request, "species/index.html.j2", context)


@router.get("/new", response_class=HTMLResponse)
@require_login
@inject
async def new_species_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Show the add-species dialog."""
    return _render_form(request, templates, config, SpeciesForm())


@router.post("/new", response_model=None)
@require_login
@inject
async def create_species(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    species_editor: Annotated[SpeciesEditor, Depends(Provide[Container.species_editor])],
) -> HTMLResponse | RedirectResponse:
    """Validate and store a new species authored by the signed-in account."""
    formdata = await request.form()
    outcome = await species_editor.create(request.user.user_id, formdata)
    return _finish_submission(request, templates, config, outcome)


@router.get("/{species_id}", response_class=HTMLResponse)
@require_login
@inject
async def species_detail(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    species_editor: Annotated[SpeciesEditor, Depends(Provide[Container.species_editor])],
) -> HTMLResponse:
    """Render the read-only learn-more view of one species."""
    species = await _load_species(species_repository, species_id)
    context = {
        **BaseTemplateContext.for_request(
            request, config, species.get_display_name(), active_page="species"
        ),
        "species": species,
        "can_edit": species_editor.can_edit(request.user.user_id, species),
    }
    return templates.TemplateResponse(request, "species/detail.html.j2", context)


@router.get("/{species_id}/edit", response_class=HTMLResponse)
@require_login
@inject
async def edit_species_page(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
) -> HTMLResponse:
    """Show the edit dialog pre-populated from the stored record."""
    species = await _load_species(species_repository, species_id)
    return _render_form(request, templates, config, SpeciesForm(obj=species), species=species)


@router.post("/{species_id}/edit", response_model=None)
@require_login
@inject
async def edit_species(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    species_editor: Annotated[SpeciesEditor, Depends(Provide[Container.species_editor])],
) -> HTMLResponse | RedirectResponse:
    """Validate an edit, check authorship and store it.

    Success redirects to the list with a notification; failures re-render
    the dialog with field errors and the reason.
    """
    species = await _load_species(species_repository, species_id)
    formdata = await request.form()
    outcome = await species_editor.edit(request.user.user_id, species, formdata)
    return _finish_submission(request, templates, config, outcome, species=species)
