"""Create accounts and species tables

Revision ID: 5c1d2e7a9b40
Revises:
Create Date: 2026-10-17 09:12:44.301552

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c1d2e7a9b40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

KINGDOMS = ("Animalia", "Plantae", "Fungi", "Protista", "Archaea", "Bacteria")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)

    op.create_table(
        "species",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scientific_name", sa.String(length=200), nullable=False),
        sa.Column("common_name", sa.String(length=200), nullable=True),
        sa.Column(
            "kingdom",
            sa.Enum(*KINGDOMS, name="kingdom", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("total_population", sa.Integer(), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("author", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["author"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_species_scientific_name", "species", ["scientific_name"])
    op.create_index("ix_species_author", "species", ["author"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_species_author", table_name="species")
    op.drop_index("ix_species_scientific_name", table_name="species")
    op.drop_table("species")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_table("accounts")
