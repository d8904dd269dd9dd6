"""remove email unique constraint

Revision ID: 0006_remove_email_unique
Revises: 0005_create_tasks_labels
Create Date: 2024-01-01 00:00:06

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0006_remove_email_unique"
down_revision: Union[str, None] = "0005_create_tasks_labels"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # SQLite не умеет DROP CONSTRAINT, batch пересоздаёт таблицу
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_constraint("uq_users_email", type_="unique")
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_email"))
        batch_op.create_unique_constraint("uq_users_email", ["email"])
