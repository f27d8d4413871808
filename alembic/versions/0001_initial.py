"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 09:30:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "licenses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("ip_limit", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("checksum", sa.LargeBinary(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_licenses")),
        sa.CheckConstraint("ip_limit > 0", name=op.f("ck_licenses_ip_limit_positive")),
    )
    op.create_index(op.f("ix_licenses_key"), "licenses", ["key"], unique=True)

    op.create_table(
        "activations",
        sa.Column("address", sa.String(length=15), nullable=False),
        sa.Column("license_id", sa.Integer(), nullable=False),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["license_id"],
            ["licenses.id"],
            name=op.f("fk_activations_license_id_licenses"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("address", "license_id", name=op.f("pk_activations")),
    )
    op.create_index(op.f("ix_activations_license_id"), "activations", ["license_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_activations_license_id"), table_name="activations")
    op.drop_table("activations")

    op.drop_index(op.f("ix_licenses_key"), table_name="licenses")
    op.drop_table("licenses")
