"""Seed the sample users.

Revision ID: 0002
Revises: 0001
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

# Runs right after 0001 on an empty table, so the rows receive ids 1..3.
SEED = ((1, "Alice"), (2, "Bob"), (3, "Terry"))

users = sa.table("users", sa.column("id", sa.Integer), sa.column("name", sa.String))


def upgrade() -> None:
    op.bulk_insert(users, [{"name": name} for _, name in SEED])


def downgrade() -> None:
    op.execute(
        users.delete().where(
            sa.or_(*(sa.and_(users.c.id == user_id, users.c.name == name) for user_id, name in SEED))
        )
    )
