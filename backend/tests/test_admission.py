from __future__ import annotations
import asyncio
import uuid
import pytest

from geocache.errors import AuthorizationError, ValidationError, SafetyRejectedError, InfrastructureError
from geocache.services.admission import CacheAdmissionPipeline
from geocache.services.geofence import GeofenceChecker, MemoryGeofenceIndex
from geocache.services.store import MemoryCacheStore, MemoryCacheWriter
from geocache.services.validator import CacheSubmissionValidator

# (lng, lat) ring around a military base
BASE = [(-74.01, 40.71), (-74.00, 40.71), (-74.00, 40.72), (-74.01, 40.72), (-74.01, 40.71)]


class SpyIndex:
    """Wraps a real index and records every query."""
    def __init__(self, inner):
        self.inner = inner
        self.calls: list[tuple[float, float]] = []

    async def first_intersecting(self, lat, lng):
        self.calls.append((lat, lng))
        return await self.inner.first_intersecting(lat, lng)


def _payload(**overrides):
    body = {
        "title": "Bench by the river",
        "description": "Small lock-n-lock behind the third bench along the river walk.",
        "hint": "Third bench",
        "difficulty": 1.5,
        "terrain": 2,
        "size": "regular",
        "lat": 40.75,
        "lng": -73.98,
        "safetyChecked": True,
    }
    body.update(overrides)
    return body


def _pipeline(index=None, store=None):
    memory = MemoryGeofenceIndex()
    memory.add_rule("base", BASE)
    spy = SpyIndex(index or memory)
    store = store or MemoryCacheStore()
    pipeline = CacheAdmissionPipeline(
        validator=CacheSubmissionValidator(),
        checker=GeofenceChecker(spy),
        store=store,
        rejection_message="Location rejected: restricted zone",
    )
    return pipeline, spy, store, memory


@pytest.mark.asyncio
async def test_safe_submission_admitted_as_pending():
    pipeline, spy, store, _ = _pipeline()
    owner = uuid.uuid4()
    rec = await pipeline.submit(_payload(), owner)
    assert rec.status == "pending"
    assert rec.owner_id == owner
    # exact coordinates for the owner
    assert (rec.lat, rec.lng) == (40.75, -73.98)
    assert store.get(rec.id) == rec
    assert store.location_of(rec.id) == (-73.98, 40.75)
    assert spy.calls == [(40.75, -73.98)]


@pytest.mark.asyncio
async def test_owner_id_as_string_accepted():
    pipeline, _, store, _ = _pipeline()
    owner = uuid.uuid4()
    rec = await pipeline.submit(_payload(), str(owner))
    assert rec.owner_id == owner
    assert len(store.records()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("owner", [None, "", "not-a-uuid"])
async def test_missing_owner_is_authorization_error(owner):
    pipeline, spy, store, _ = _pipeline()
    with pytest.raises(AuthorizationError):
        await pipeline.submit(_payload(), owner)
    assert spy.calls == []
    assert store.records() == []


@pytest.mark.asyncio
async def test_authorization_checked_before_validation():
    pipeline, _, _, _ = _pipeline()
    with pytest.raises(AuthorizationError):
        await pipeline.submit({"title": "x"}, None)


@pytest.mark.asyncio
async def test_missing_acknowledgement_never_reaches_geofence():
    pipeline, spy, store, _ = _pipeline()
    raw = _payload()
    del raw["safetyChecked"]
    with pytest.raises(ValidationError) as ei:
        await pipeline.submit(raw, uuid.uuid4())
    assert "safetyChecked" in ei.value.violations
    assert spy.calls == []
    assert store.records() == []


@pytest.mark.asyncio
async def test_validation_failure_carries_every_violation():
    pipeline, spy, store, _ = _pipeline()
    with pytest.raises(ValidationError) as ei:
        await pipeline.submit(_payload(title="abc", difficulty=9), uuid.uuid4())
    assert {"title", "difficulty"} <= set(ei.value.violations)
    assert spy.calls == []
    assert store.records() == []


@pytest.mark.asyncio
async def test_point_in_restricted_zone_rejected_with_nothing_written():
    pipeline, _, store, _ = _pipeline()
    with pytest.raises(SafetyRejectedError) as ei:
        await pipeline.submit(_payload(lat=40.715, lng=-74.005), uuid.uuid4())
    assert ei.value.reason == "Location rejected: restricted zone"
    assert ei.value.rule_id == "base"
    assert store.records() == []


@pytest.mark.asyncio
async def test_point_on_zone_boundary_rejected():
    pipeline, _, store, _ = _pipeline()
    with pytest.raises(SafetyRejectedError):
        await pipeline.submit(_payload(lat=40.71, lng=-74.005), uuid.uuid4())
    assert store.records() == []


@pytest.mark.asyncio
async def test_deactivated_zone_admits_point():
    pipeline, _, store, memory = _pipeline()
    with pytest.raises(SafetyRejectedError):
        await pipeline.submit(_payload(lat=40.715, lng=-74.005), uuid.uuid4())
    memory.set_active("base", False)
    rec = await pipeline.submit(_payload(lat=40.715, lng=-74.005), uuid.uuid4())
    assert store.get(rec.id) is not None


@pytest.mark.asyncio
async def test_geofence_failure_is_infrastructure_error():
    class DownIndex:
        async def first_intersecting(self, lat, lng):
            raise OSError("connection refused")

    pipeline, spy, store, _ = _pipeline(index=DownIndex())
    with pytest.raises(InfrastructureError) as ei:
        await pipeline.submit(_payload(), uuid.uuid4())
    assert ei.value.stage == "geofence"
    assert len(spy.calls) == 1
    assert store.records() == []


@pytest.mark.asyncio
async def test_fault_between_row_and_geometry_leaves_no_record(monkeypatch):
    attempts = []

    async def broken_write_location(self, cache_id, lat, lng):
        attempts.append(cache_id)
        raise RuntimeError("geometry write failed")

    monkeypatch.setattr(MemoryCacheWriter, "write_location", broken_write_location)
    pipeline, _, store, _ = _pipeline()
    with pytest.raises(InfrastructureError) as ei:
        await pipeline.submit(_payload(), uuid.uuid4())
    assert ei.value.stage == "persist"
    assert store.records() == []
    # not retried
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_fault_on_row_write_leaves_no_record(monkeypatch):
    async def broken_insert(self, candidate, owner_id):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(MemoryCacheWriter, "insert_cache", broken_insert)
    pipeline, _, store, _ = _pipeline()
    with pytest.raises(InfrastructureError):
        await pipeline.submit(_payload(), uuid.uuid4())
    assert store.records() == []


@pytest.mark.asyncio
async def test_description_stored_sanitized():
    pipeline, _, store, _ = _pipeline()
    rec = await pipeline.submit(
        _payload(description="<img src=x onerror=alert(1)>Behind the fence post near the gate."),
        uuid.uuid4(),
    )
    assert "onerror" not in store.get(rec.id).description


@pytest.mark.asyncio
async def test_independent_submissions_get_distinct_records():
    pipeline, _, store, _ = _pipeline()
    a = await pipeline.submit(_payload(), uuid.uuid4())
    b = await pipeline.submit(_payload(), uuid.uuid4())
    assert a.id != b.id
    assert len(store.records()) == 2


@pytest.mark.asyncio
async def test_persist_deadline_is_infrastructure_error(monkeypatch):
    async def slow_insert(self, candidate, owner_id):
        await asyncio.sleep(1)

    monkeypatch.setattr(MemoryCacheWriter, "insert_cache", slow_insert)
    store = MemoryCacheStore()
    pipeline = CacheAdmissionPipeline(
        validator=CacheSubmissionValidator(),
        checker=GeofenceChecker(MemoryGeofenceIndex()),
        store=store,
        timeout=0.01,
    )
    with pytest.raises(InfrastructureError) as ei:
        await pipeline.submit(_payload(), uuid.uuid4())
    assert ei.value.stage == "persist"
    assert store.records() == []
