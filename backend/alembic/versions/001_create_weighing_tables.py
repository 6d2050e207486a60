"""Create cooperatives, workers, materials, devices and measurements

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema for the weighing backend.
How:   Mirrors the models in app/models. Weight is NUMERIC(10, 3) kilograms.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cooperatives",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False,
                  comment="Display name of the cooperative"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "workers",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("cpf", sa.String(11), nullable=True,
                  comment="Brazilian taxpayer id, digits only"),
        sa.Column("password_hash", sa.LargeBinary(), nullable=True,
                  comment="bcrypt hash (opaque bytes); NULL means login is disabled"),
        sa.Column("cooperative_id", sa.BigInteger(), nullable=True),
        sa.Column("last_update", sa.DateTime(timezone=True), nullable=True,
                  comment="When the profile was last changed (UTC)"),
        sa.ForeignKeyConstraint(["cooperative_id"], ["cooperatives.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cpf"),
    )
    op.create_index("idx_workers_cooperative_id", "workers", ["cooperative_id"])

    op.create_table(
        "materials",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False,
                  comment="Display name; unique, compared case-insensitively on lookup"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(
        "idx_materials_name_lower",
        "materials",
        [sa.text("lower(name)")],
    )

    op.create_table(
        "devices",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("cooperative_id", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["cooperative_id"], ["cooperatives.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_devices_cooperative_id", "devices", ["cooperative_id"])

    op.create_table(
        "measurements",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("worker_id", sa.BigInteger(), nullable=False),
        sa.Column("material_id", sa.BigInteger(), nullable=False),
        sa.Column("device_id", sa.BigInteger(), nullable=False),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=False,
                  comment="Weight in kilograms, exact decimal, always > 0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  comment="Server-assigned weighing time (UTC)"),
        sa.Column("bag_filled", sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.CheckConstraint("weight_kg > 0", name="ck_measurements_weight_positive"),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"]),
        sa.ForeignKeyConstraint(["material_id"], ["materials.id"]),
        sa.ForeignKeyConstraint(["device_id"], ["devices.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    # History query: WHERE worker_id = :id ORDER BY created_at DESC
    op.create_index(
        "idx_measurements_worker_created",
        "measurements",
        ["worker_id", "created_at"],
    )


def downgrade() -> None:
    """Drop every table. All data is lost."""
    op.drop_index("idx_measurements_worker_created", table_name="measurements")
    op.drop_table("measurements")
    op.drop_index("idx_devices_cooperative_id", table_name="devices")
    op.drop_table("devices")
    op.drop_index("idx_materials_name_lower", table_name="materials")
    op.drop_table("materials")
    op.drop_index("idx_workers_cooperative_id", table_name="workers")
    op.drop_table("workers")
    op.drop_table("cooperatives")
