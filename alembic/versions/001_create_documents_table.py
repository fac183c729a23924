"""Create documents table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `documents` table backing DocumentStore.
How:   One row per document; `collection` partitions rows, `body` holds the
       fields as JSON (JSONB on PostgreSQL), `_id` is the public identity.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("_id", sa.String(24), nullable=False),
        sa.Column("collection", sa.String(64), nullable=False),
        sa.Column(
            "body",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("_id"),
    )

    # Every query filters on collection; list queries also order by seq
    op.create_index(
        "idx_documents_collection_seq",
        "documents",
        ["collection", "seq"],
    )


def downgrade() -> None:
    op.drop_index("idx_documents_collection_seq", table_name="documents")
    op.drop_table("documents")
