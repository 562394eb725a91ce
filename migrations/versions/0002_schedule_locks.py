"""schedule locks for check-then-insert

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "schedule_locks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("day", sa.String(16), nullable=False),
        sa.Column("scope", sa.String(16), nullable=False),
        sa.Column("ref_id", sa.String(36), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("day", "scope", "ref_id", name="uq_schedule_locks_key"),
    )

def downgrade():
    op.drop_table("schedule_locks")
