"""create calculations table

Revision ID: 4c1f0e2a9b7d
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4c1f0e2a9b7d"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


operator_enum = sa.Enum("+", "-", "*", "/", name="calculation_operator_enum")


def upgrade() -> None:
    op.create_table(
        "calculations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("operand1", sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column("operator", operator_enum, nullable=False),
        sa.Column("operand2", sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column("result", sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_calculations_timestamp_desc",
        "calculations",
        [sa.text("timestamp DESC")],
        unique=False,
    )
    op.create_index(op.f("ix_calculations_operator"), "calculations", ["operator"], unique=False)
    op.create_index(op.f("ix_calculations_result"), "calculations", ["result"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_calculations_result"), table_name="calculations")
    op.drop_index(op.f("ix_calculations_operator"), table_name="calculations")
    op.drop_index("ix_calculations_timestamp_desc", table_name="calculations")
    op.drop_table("calculations")
    operator_enum.drop(op.get_bind(), checkfirst=True)
