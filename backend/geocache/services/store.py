from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone as dt_tz
from typing import AsyncContextManager, AsyncIterator, Protocol
from uuid import UUID
from sqlalchemy import update, func, cast
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from geoalchemy2 import Geography

from geocache.config import settings
from geocache.models.cache import Cache
from geocache.schemas.cache import CacheCandidate, CacheRecord


class CacheWriter(Protocol):
    async def insert_cache(self, candidate: CacheCandidate, owner_id: UUID) -> CacheRecord: ...

    async def write_location(self, cache_id: UUID, lat: float, lng: float) -> None: ...


class CacheStore(Protocol):
    def transaction(self) -> AsyncContextManager[CacheWriter]:
        """Both writes made through the yielded writer commit together or not at all."""
        ...


# ---------- PostgreSQL / PostGIS ----------

def location_update_statement(cache_id: UUID, lat: float, lng: float, srid: int):
    point = cast(func.ST_SetSRID(func.ST_MakePoint(lng, lat), srid), Geography("POINT", srid=srid))
    return update(Cache).where(Cache.id == cache_id).values(location=point)


class SqlCacheWriter:
    def __init__(self, session: AsyncSession, srid: int):
        self.session = session
        self.srid = srid

    async def insert_cache(self, candidate: CacheCandidate, owner_id: UUID) -> CacheRecord:
        cache = Cache(
            owner_id=owner_id,
            title=candidate.title,
            description=candidate.description,
            hint=candidate.hint,
            difficulty=candidate.difficulty,
            terrain=candidate.terrain,
            size=candidate.size,
            lat=candidate.lat,
            lng=candidate.lng,
            status="pending",  # awaits moderator approval
        )
        self.session.add(cache)
        await self.session.flush()
        await self.session.refresh(cache, attribute_names=["created_at"])
        return CacheRecord.model_validate(cache)

    async def write_location(self, cache_id: UUID, lat: float, lng: float) -> None:
        await self.session.execute(location_update_statement(cache_id, lat, lng, self.srid))


class SqlCacheStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], srid: int | None = None):
        self.session_factory = session_factory
        self.srid = srid or settings.geofence_srid

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlCacheWriter]:
        async with self.session_factory() as session:
            async with session.begin():
                yield SqlCacheWriter(session, self.srid)


# ---------- in-process ----------

class MemoryCacheWriter:
    def __init__(self):
        self.rows: dict[UUID, CacheRecord] = {}
        self.locations: dict[UUID, tuple[float, float]] = {}

    async def insert_cache(self, candidate: CacheCandidate, owner_id: UUID) -> CacheRecord:
        record = CacheRecord(
            id=uuid.uuid4(),
            owner_id=owner_id,
            status="pending",
            created_at=datetime.now(dt_tz.utc),
            **candidate.model_dump(),
        )
        self.rows[record.id] = record
        return record

    async def write_location(self, cache_id: UUID, lat: float, lng: float) -> None:
        if cache_id not in self.rows:
            raise LookupError(f"no staged cache {cache_id}")
        # stored (lng, lat) like a PostGIS point
        self.locations[cache_id] = (lng, lat)


class MemoryCacheStore:
    """Staged writes become visible only when the transaction block exits cleanly."""

    def __init__(self):
        self._rows: dict[UUID, CacheRecord] = {}
        self._locations: dict[UUID, tuple[float, float]] = {}

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[MemoryCacheWriter]:
        writer = MemoryCacheWriter()
        yield writer
        self._rows.update(writer.rows)
        self._locations.update(writer.locations)

    def records(self) -> list[CacheRecord]:
        return list(self._rows.values())

    def get(self, cache_id: UUID) -> CacheRecord | None:
        return self._rows.get(cache_id)

    def location_of(self, cache_id: UUID) -> tuple[float, float] | None:
        return self._locations.get(cache_id)
