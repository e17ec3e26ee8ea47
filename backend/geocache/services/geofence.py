from __future__ import annotations
import asyncio
from typing import Any, Iterable, Protocol
from sqlalchemy import select, func, cast
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from geoalchemy2 import Geography
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from geocache.config import settings
from geocache.errors import InfrastructureError
from geocache.models.geofence import GeofenceRule


class GeofenceIndex(Protocol):
    """Anything that can answer "which active region touches this point?"."""

    async def first_intersecting(self, lat: float, lng: float) -> Any | None:
        """Id of one active rule intersecting the point, or None. Must stop at the first hit."""
        ...


def active_intersection_query(lat: float, lng: float, srid: int):
    # ST_Intersects is true for boundary contact as well as containment
    point = cast(func.ST_SetSRID(func.ST_MakePoint(lng, lat), srid), Geography("POINT", srid=srid))
    return (
        select(GeofenceRule.id)
        .where(GeofenceRule.is_active.is_(True))
        .where(func.ST_Intersects(GeofenceRule.boundary, point))
        .limit(1)
    )


class PostgisGeofenceIndex:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], srid: int | None = None):
        self.session_factory = session_factory
        self.srid = srid or settings.geofence_srid

    async def first_intersecting(self, lat: float, lng: float) -> Any | None:
        q = active_intersection_query(lat, lng, self.srid)
        async with self.session_factory() as session:
            return await session.scalar(q)


class MemoryGeofenceIndex:
    """
    In-process rule set backed by a Shapely STRtree.

    Boundaries are (lng, lat) rings, same axis order as PostGIS points.
    The tree only holds active rules and is rebuilt on every rule change,
    so a query never sees a stale rule set. Edges are planar, which matches
    PostGIS geography closely for zone-sized polygons.
    """

    def __init__(self):
        self._rules: dict[Any, tuple[BaseGeometry, bool]] = {}
        self._ids: list[Any] = []
        self._tree: STRtree | None = None

    def add_rule(self, rule_id: Any, boundary: BaseGeometry | Iterable[tuple[float, float]], active: bool = True) -> None:
        poly = boundary if isinstance(boundary, BaseGeometry) else Polygon(list(boundary))
        if poly.is_empty or not poly.is_valid:
            raise ValueError(f"invalid geofence boundary for rule {rule_id!r}")
        self._rules[rule_id] = (poly, active)
        self._rebuild()

    def set_active(self, rule_id: Any, active: bool) -> None:
        poly, _ = self._rules[rule_id]
        self._rules[rule_id] = (poly, active)
        self._rebuild()

    def remove_rule(self, rule_id: Any) -> None:
        del self._rules[rule_id]
        self._rebuild()

    def _rebuild(self) -> None:
        ids = [rid for rid, (_, active) in self._rules.items() if active]
        self._ids = ids
        self._tree = STRtree([self._rules[rid][0] for rid in ids]) if ids else None

    async def first_intersecting(self, lat: float, lng: float) -> Any | None:
        ids, tree = self._ids, self._tree
        if tree is None:
            return None
        hits = tree.query(Point(lng, lat), predicate="intersects")
        if len(hits) == 0:
            return None
        return ids[int(hits[0])]


class GeofenceChecker:
    """
    isSafe over a GeofenceIndex. Never answers "safe" when the index could
    not be asked: failures and deadline expiry surface as InfrastructureError.
    """

    def __init__(self, index: GeofenceIndex, timeout: float | None = None):
        self.index = index
        self.timeout = timeout

    async def violated_rule(self, lat: float, lng: float) -> Any | None:
        try:
            return await asyncio.wait_for(self.index.first_intersecting(lat, lng), self.timeout)
        except asyncio.TimeoutError as e:
            raise InfrastructureError("geofence query timed out", stage="geofence") from e
        except Exception as e:
            raise InfrastructureError(e, stage="geofence") from e

    async def is_safe(self, lat: float, lng: float) -> bool:
        return await self.violated_rule(lat, lng) is None
