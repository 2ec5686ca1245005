"""Reads and writes against the species table.

The update statement carries the authorship rule itself, so a request that
slips past the editor's check is still refused by the store.
"""

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from specieshub.database.core import DatabaseService
from specieshub.species.models import Species, SpeciesValues

logger = logging.getLogger(__name__)


class SpeciesStoreError(Exception):
    """Raised when the species store cannot complete a request."""


class SpeciesNotFoundError(SpeciesStoreError):
    """Raised when no species row has the requested id."""


class SpeciesAccessDeniedError(SpeciesStoreError):
    """Raised when the acting account may not modify the requested row."""


class SpeciesRepository:
    """Species table access for the web views and the CLI."""

    def __init__(self, core_database: DatabaseService):
        self.core_database = core_database

    async def list_species(self) -> list[Species]:
        """Return every species row ordered by id."""
        async with self.core_database.get_async_db() as session:
            try:
                result = await session.execute(select(Species).order_by(Species.id))
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error("Error listing species: %s", e)
                raise SpeciesStoreError("Could not load species.") from e

    async def get_species(self, species_id: int) -> Species | None:
        """Return one species row, or None if the id is unknown."""
        async with self.core_database.get_async_db() as session:
            try:
                return await session.get(Species, species_id)
            except SQLAlchemyError as e:
                logger.error("Error loading species %s: %s", species_id, e)
                raise SpeciesStoreError("Could not load species.") from e

    async def create_species(self, author: str | None, values: SpeciesValues) -> Species:
        """Insert a new species row owned by ``author``."""
        species = Species(author=author, **values.model_dump())
        async with self.core_database.get_async_db() as session:
            try:
                session.add(species)
                await session.commit()
                await session.refresh(species)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Error creating species %s: %s", values.scientific_name, e)
                raise SpeciesStoreError("Could not save species.") from e

        logger.info("Species %s created by %s", species.id, author)
        return species

    async def update_species(self, species_id: int, author: str, values: SpeciesValues) -> Species:
        """Update a species row on behalf of ``author``.

        Raises:
            SpeciesNotFoundError: No row has ``species_id``
            SpeciesAccessDeniedError: The row belongs to another account
            SpeciesStoreError: The database rejected the statement
        """
        statement = (
            update(Species)
            .where(Species.id == species_id)  # type: ignore[arg-type]
            .where(or_(Species.author.is_(None), Species.author == author))  # type: ignore[union-attr]
            .values(**values.model_dump())
        )
        async with self.core_database.get_async_db() as session:
            try:
                result = await session.execute(statement)
                if result.rowcount == 0:
                    await session.rollback()
                    existing = await session.get(Species, species_id)
                    if existing is None:
                        raise SpeciesNotFoundError(f"Species {species_id} does not exist.")
                    raise SpeciesAccessDeniedError("You can only edit species you created.")
                await session.commit()
                species = await session.get(Species, species_id, populate_existing=True)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Error updating species %s: %s", species_id, e)
                raise SpeciesStoreError("Could not save species.") from e

        if species is None:
            raise SpeciesNotFoundError(f"Species {species_id} does not exist.")
        logger.info("Species %s updated by %s", species_id, author)
        return species
