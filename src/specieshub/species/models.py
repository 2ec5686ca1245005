"""Database models for the species domain."""

from enum import StrEnum

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import Column, String, Text
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

# Largest value a SQLite INTEGER column holds
MAX_POPULATION = 2**63 - 1


class Kingdom(StrEnum):
    """Taxonomic kingdoms a species record may belong to."""

    ANIMALIA = "Animalia"
    PLANTAE = "Plantae"
    FUNGI = "Fungi"
    PROTISTA = "Protista"
    ARCHAEA = "Archaea"
    BACTERIA = "Bacteria"


class Species(SQLModel, table=True):
    """Represents one taxonomic entry in the catalog."""

    __tablename__: str = "species"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    scientific_name: str = Field(sa_column=Column(String(200), nullable=False, index=True))
    common_name: str | None = Field(default=None, sa_column=Column(String(200)))
    kingdom: Kingdom = Field(
        sa_column=Column(
            SAEnum(
                Kingdom,
                name="kingdom",
                native_enum=False,
                length=16,
                values_callable=lambda kingdoms: [k.value for k in kingdoms],
            ),
            nullable=False,
        )
    )
    total_population: int | None = None
    image: str | None = Field(default=None, sa_column=Column(Text))
    description: str | None = Field(default=None, sa_column=Column(Text))
    author: str | None = Field(default=None, foreign_key="accounts.id", index=True)

    def get_display_name(self) -> str:
        """Get the best available species display name."""
        return str(self.common_name or self.scientific_name)

    def is_editable_by(self, user_id: str | None) -> bool:
        """Whether the given account passes the author check for this row.

        Rows without an author can be edited by any signed-in account.
        """
        if user_id is None:
            return False
        return not self.author or self.author == user_id


class SpeciesValues(BaseModel):
    """Validated, normalised field values for inserting or updating a species row."""

    scientific_name: str = PydanticField(min_length=1)
    common_name: str | None = None
    kingdom: Kingdom = Kingdom.ANIMALIA
    total_population: int | None = PydanticField(default=None, ge=1, le=MAX_POPULATION)
    image: str | None = None
    description: str | None = None
