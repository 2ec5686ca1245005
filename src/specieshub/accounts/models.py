"""Database models for the accounts domain."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


class Account(SQLModel, table=True):
    """A signed-in user; its id is the author identifier stored on species rows."""

    __tablename__: str = "accounts"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    email: str = Field(sa_column=Column(String(254), unique=True, index=True, nullable=False))
    display_name: str | None = Field(default=None, sa_column=Column(String(100)))
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def get_display_name(self) -> str:
        """Get the best available name for the account."""
        return self.display_name or self.email
