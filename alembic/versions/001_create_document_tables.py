"""Create document collections

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Creates one table per collection: users, package_documents, bundles,
       faqs, exam_histories. Payloads are JSONB on PostgreSQL, JSON elsewhere.
How:   Unique indexes on users.email and exam_histories.student_id make the
       store reject duplicates. An empty package document is seeded so
       POST /add-package has something to append to.

Rollback: downgrade() drops every table (destructive: all data is lost).
"""

import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DOCUMENT = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "email",
            sa.String(320),
            nullable=False,
            comment="Login identity and lookup key; at most one user per email",
        ),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="passlib hash string (scheme + salt + digest)",
        ),
        sa.Column(
            "profile",
            DOCUMENT,
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Profile document: name, phone, dateOfBirth, address, gender, photoURL, ...",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "package_documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "packages",
            DOCUMENT,
            nullable=False,
            server_default=sa.text("'[]'"),
            comment="Ordered list of package objects, each with a questions list",
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    for table in ("bundles", "faqs"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column(
                "document",
                DOCUMENT,
                nullable=False,
                server_default=sa.text("'{}'"),
            ),
            _timestamp("created_at"),
            sa.PrimaryKeyConstraint("id"),
        )

    op.create_table(
        "exam_histories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("student_id", sa.String(255), nullable=False),
        sa.Column(
            "exams",
            DOCUMENT,
            nullable=False,
            server_default=sa.text("'[]'"),
        ),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exam_histories_student_id", "exam_histories", ["student_id"], unique=True)

    # The single container that POST /add-package appends to
    package_documents = sa.table(
        "package_documents",
        sa.column("id", sa.Uuid()),
    )
    op.bulk_insert(package_documents, [{"id": uuid.uuid4()}])


def downgrade() -> None:
    op.drop_index("ix_exam_histories_student_id", table_name="exam_histories")
    op.drop_table("exam_histories")
    op.drop_table("faqs")
    op.drop_table("bundles")
    op.drop_table("package_documents")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
