from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Numeric, Float, DateTime, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from geoalchemy2 import Geography
from geocache.db import Base


class Cache(Base):
    __tablename__ = "caches"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False)  # sanitized
    hint: Mapped[str | None] = mapped_column(String(500), nullable=True)  # plain text, ROT13 on disclosure
    difficulty: Mapped[float] = mapped_column(Numeric(2, 1, asdecimal=False), nullable=False)
    terrain: Mapped[float] = mapped_column(Numeric(2, 1, asdecimal=False), nullable=False)
    size: Mapped[str] = mapped_column(String(16), nullable=False)  # micro|small|regular|large

    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    # Written by a second statement inside the creating transaction
    location = mapped_column(Geography("POINT", srid=4326, spatial_index=True), nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)  # pending|approved|rejected|archived
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_caches_difficulty_range"),
        CheckConstraint("terrain BETWEEN 1 AND 5", name="ck_caches_terrain_range"),
        CheckConstraint("lat BETWEEN -90 AND 90", name="ck_caches_lat_range"),
        CheckConstraint("lng BETWEEN -180 AND 180", name="ck_caches_lng_range"),
        CheckConstraint("size IN ('micro','small','regular','large')", name="ck_caches_size"),
    )
