"""Add and edit submission flow for species records.

Each submission ends in an ``EditOutcome``: success, a validation error, an
authorship rejection, a locked seed row, or a store failure. The outcome
carries the bound form so a failed submission can be shown again with its
field errors.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from specieshub.config.models import SpeciesHubConfig
from specieshub.species.forms import SpeciesForm
from specieshub.species.models import Species
from specieshub.species.repository import SpeciesRepository, SpeciesStoreError
from specieshub.utils.notifications import Notification

logger = logging.getLogger(__name__)

NOT_AUTHOR_MESSAGE = "You can only edit species you created."
LOCKED_MESSAGE = "Seed species are read-only."


class EditStatus(StrEnum):
    """How a species submission ended."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    NOT_AUTHOR = "not_author"
    LOCKED = "locked"
    BACKEND_ERROR = "backend_error"


@dataclass
class EditOutcome:
    """Result of an add or edit submission."""

    status: EditStatus
    form: SpeciesForm
    species: Species | None = None
    notification: Notification | None = None

    @property
    def ok(self) -> bool:
        """Whether the submission was stored."""
        return self.status is EditStatus.SUCCESS


def _failure(status: EditStatus, form: SpeciesForm, description: str) -> EditOutcome:
    return EditOutcome(
        status=status,
        form=form,
        notification=Notification("Something went wrong.", description, "destructive"),
    )


class SpeciesEditor:
    """Validates species submissions and sends them to the store."""

    def __init__(self, species_repository: SpeciesRepository, config: SpeciesHubConfig):
        self.species_repository = species_repository
        self.config = config

    def is_locked(self, species: Species) -> bool:
        """Whether the row is seed data that nobody may edit."""
        limit = self.config.locked_species_through_id
        return species.id is not None and limit > 0 and species.id <= limit

    def can_edit(self, user_id: str | None, species: Species) -> bool:
        """Whether an edit by ``user_id`` would pass the author and lock checks."""
        return species.is_editable_by(user_id) and not self.is_locked(species)

    async def edit(self, user_id: str, species: Species, formdata: Any) -> EditOutcome:
        """Validate an edit of ``species`` and store it.

        The author check happens before the store is contacted; the store
        repeats it in its update statement.
        """
        form = SpeciesForm(formdata)
        if not form.validate():
            logger.debug("Species %s edit failed validation: %s", species.id, form.errors)
            return _failure(EditStatus.VALIDATION_ERROR, form, "Please correct the errors below.")

        if species.author and species.author != user_id:
            logger.info("Rejected edit of species %s by non-author %s", species.id, user_id)
            return _failure(EditStatus.NOT_AUTHOR, form, NOT_AUTHOR_MESSAGE)

        if self.is_locked(species):
            return _failure(EditStatus.LOCKED, form, LOCKED_MESSAGE)

        values = form.to_values()
        try:
            updated = await self.species_repository.update_species(
                species.id,  # type: ignore[arg-type]
                user_id,
                values,
            )
        except SpeciesStoreError as e:
            return _failure(EditStatus.BACKEND_ERROR, form, str(e))

        return EditOutcome(
            status=EditStatus.SUCCESS,
            form=form,
            species=updated,
            notification=Notification(
                "Species edited!", f"Successfully edited {values.scientific_name}."
            ),
        )

    async def create(self, user_id: str, formdata: Any) -> EditOutcome:
        """Validate a new species submission and store it as authored by ``user_id``."""
        form = SpeciesForm(formdata)
        if not form.validate():
            return _failure(EditStatus.VALIDATION_ERROR, form, "Please correct the errors below.")

        values = form.to_values()
        try:
            created = await self.species_repository.create_species(user_id, values)
        except SpeciesStoreError as e:
            return _failure(EditStatus.BACKEND_ERROR, form, str(e))

        return EditOutcome(
            status=EditStatus.SUCCESS,
            form=form,
            species=created,
            notification=Notification(
                "New species added!", f"Successfully added {values.scientific_name}."
            ),
        )
