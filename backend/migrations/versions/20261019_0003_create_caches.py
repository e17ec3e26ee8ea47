from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from geoalchemy2 import Geography

# revision identifiers
revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "caches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("hint", sa.String(length=500), nullable=True),
        sa.Column("difficulty", sa.Numeric(2, 1), nullable=False),
        sa.Column("terrain", sa.Numeric(2, 1), nullable=False),
        sa.Column("size", sa.String(length=16), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("location", Geography("POINT", srid=4326, spatial_index=False), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_caches_difficulty_range"),
        sa.CheckConstraint("terrain BETWEEN 1 AND 5", name="ck_caches_terrain_range"),
        sa.CheckConstraint("lat BETWEEN -90 AND 90", name="ck_caches_lat_range"),
        sa.CheckConstraint("lng BETWEEN -180 AND 180", name="ck_caches_lng_range"),
        sa.CheckConstraint("size IN ('micro','small','regular','large')", name="ck_caches_size"),
    )
    op.create_index("ix_caches_owner_id", "caches", ["owner_id"])
    op.create_index("ix_caches_status", "caches", ["status"])
    op.create_index("idx_caches_location", "caches", ["location"], postgresql_using="gist")

def downgrade() -> None:
    op.drop_index("idx_caches_location", table_name="caches")
    op.drop_index("ix_caches_status", table_name="caches")
    op.drop_index("ix_caches_owner_id", table_name="caches")
    op.drop_table("caches")
