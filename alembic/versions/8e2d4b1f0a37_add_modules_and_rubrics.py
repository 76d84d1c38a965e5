"""add modules and rubrics

Revision ID: 8e2d4b1f0a37
Revises: 3c1f7a92b6d4
Create Date: 2026-10-19 15:40:03.517290

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e2d4b1f0a37'
down_revision: Union[str, Sequence[str], None] = '3c1f7a92b6d4'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("classroom_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["classroom_id"], ["classrooms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_modules_id"), "modules", ["id"], unique=False)
    op.create_index(op.f("ix_modules_classroom_id"), "modules", ["classroom_id"], unique=False)

    with op.batch_alter_table("assignments", recreate="always") as batch_op:
        batch_op.add_column(sa.Column("module_id", sa.Integer(), nullable=True))
        batch_op.create_index(batch_op.f("ix_assignments_module_id"), ["module_id"], unique=False)
        batch_op.create_foreign_key(
            "fk_assignments_module_id_modules",
            "modules",
            ["module_id"],
            ["id"],
            ondelete="CASCADE",
        )

    op.create_table(
        "rubrics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("classroom_id", sa.Integer(), nullable=False),
        sa.Column("assignment_id", sa.Integer(), nullable=False),
        sa.Column("criteria", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["classroom_id"], ["classrooms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rubrics_id"), "rubrics", ["id"], unique=False)
    op.create_index(op.f("ix_rubrics_classroom_id"), "rubrics", ["classroom_id"], unique=False)
    op.create_index(op.f("ix_rubrics_assignment_id"), "rubrics", ["assignment_id"], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("rubrics")

    with op.batch_alter_table("assignments", recreate="always") as batch_op:
        batch_op.drop_constraint("fk_assignments_module_id_modules", type_="foreignkey")
        batch_op.drop_index(batch_op.f("ix_assignments_module_id"))
        batch_op.drop_column("module_id")

    op.drop_table("modules")
