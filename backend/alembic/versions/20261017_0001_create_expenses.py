"""Create the expenses table."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "expenses",
        sa.Column("expense_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint(
            "length(trim(description)) > 0", name="ck_expenses_description_not_blank"
        ),
    )
    op.create_index("expenses_date_created_idx", "expenses", ["date", "created_at"])
    op.create_index("expenses_category_idx", "expenses", ["category"])


def downgrade() -> None:
    op.drop_index("expenses_category_idx", table_name="expenses")
    op.drop_index("expenses_date_created_idx", table_name="expenses")
    op.drop_table("expenses")
