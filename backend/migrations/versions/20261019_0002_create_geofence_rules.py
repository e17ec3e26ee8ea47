from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from geoalchemy2 import Geography

# revision identifiers
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "geofence_rules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("boundary", Geography("POLYGON", srid=4326, spatial_index=False), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_geofence_rules_is_active", "geofence_rules", ["is_active"])
    op.create_index("idx_geofence_rules_boundary", "geofence_rules", ["boundary"], postgresql_using="gist")

def downgrade() -> None:
    op.drop_index("idx_geofence_rules_boundary", table_name="geofence_rules")
    op.drop_index("ix_geofence_rules_is_active", table_name="geofence_rules")
    op.drop_table("geofence_rules")
